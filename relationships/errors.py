"""
Typed failures raised by the relationship engine.

Every error is a DRF ``APIException`` so the API layer renders it as a
``{"detail": ..., "code": ...}`` body with the matching status code. The
service layer raises them before any write, so catching one means nothing
changed.
"""
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler


class RelationshipError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The relationship operation could not be completed."
    default_code = "relationship_error"


class Unauthorized(RelationshipError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to act for this account."
    default_code = "unauthorized"


class SelfReference(RelationshipError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "You cannot connect with yourself."
    default_code = "self_reference"


class AlreadyRequested(RelationshipError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "A connection request is already pending or accepted."
    default_code = "already_requested"


class AlreadyResolved(RelationshipError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This request has already been responded to."
    default_code = "already_resolved"


class NotFound(RelationshipError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class NotCancelable(RelationshipError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Only pending requests can be cancelled. Remove the connection instead."
    default_code = "not_cancelable"


class Blocked(RelationshipError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Connection is blocked."
    default_code = "blocked"


class SelfFollow(RelationshipError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "You cannot follow a company you administer."
    default_code = "self_follow"


def exception_handler(exc, context):
    """DRF exception handler that adds the stable error ``code`` to engine failures."""
    response = drf_exception_handler(exc, context)
    if response is not None and isinstance(exc, RelationshipError):
        response.data["code"] = exc.default_code
    return response
