"""
Delegated authority: may a person act on behalf of a company?
"""
import logging
import uuid
from rest_framework import permissions
from relationships.conf import engine_setting
from relationships.models import Company, Membership, MembershipStatus

logger = logging.getLogger(__name__)


def can_act_for(person, company) -> bool:
    """
    Return True iff ``person`` holds an active OWNER/ADMIN membership in ``company``.

    Unknown pairs, anonymous users and missing arguments are simply False;
    lacking authority is not an error.
    """
    if person is None or company is None:
        return False
    if not getattr(person, "is_authenticated", False):
        return False
    if isinstance(company, Company):
        company_id = company.pk
    else:
        try:
            company_id = uuid.UUID(str(company))
        except ValueError:
            return False
    return Membership.objects.filter(
        person_id=person.pk,
        company_id=company_id,
        role__in=engine_setting("ADMIN_ROLES"),
        status=MembershipStatus.ACTIVE,
    ).exists()


class IsCompanyAdmin(permissions.BasePermission):
    """
    Allows access only to owners/admins of the company named in the URL.

    The view must expose the company id through ``company_url_kwarg``
    (defaults to ``company_id``).
    """
    message = "You do not have permission to manage this company's connections."

    def has_permission(self, request, view):
        kwarg = getattr(view, "company_url_kwarg", "company_id")
        company_id = view.kwargs.get(kwarg)
        allowed = can_act_for(request.user, company_id)
        if not allowed:
            logger.debug("Person %s denied admin access to company %s", request.user.pk, company_id)
        return allowed
