from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.authentication import SessionAuthentication, BasicAuthentication
from django.shortcuts import get_object_or_404
from relationships.models import Person, ActorKind
from relationships.serializers import (
    ConnectionRequestSerializer,
    ConnectionStatusSerializer,
    NetworkEntrySerializer,
    RespondSerializer,
    SendConnectionRequestSerializer,
)
from relationships import services


class ConnectionRequestListAPIView(APIView):
    """
    POST /api/connections/
    Send a connection request from the logged-in person to another person.

    Example request:
    {
        "addressee_person_id": "6a2f...",
        "note": "We met at the expo"
    }
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = SendConnectionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        addressee = get_object_or_404(Person, pk=serializer.validated_data["addressee_person_id"])
        connection_request = services.send_request(
            request.user,
            request.user,
            addressee,
            notes=serializer.validated_data["note"],
        )
        return Response(
            ConnectionRequestSerializer(connection_request, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )


class ConnectionRequestRespondAPIView(APIView):
    """
    POST /api/connections/<request_id>/respond/
    Body: {"decision": "accept"} or {"decision": "decline"}
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request, request_id):
        serializer = RespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        connection_request = services.get_request(ActorKind.PERSON, request_id)
        connection_request = services.respond_to_request(
            request.user, connection_request, serializer.validated_data["decision"]
        )
        return Response(ConnectionRequestSerializer(connection_request, context={"request": request}).data)


class ConnectionRequestDetailAPIView(APIView):
    """
    DELETE /api/connections/<request_id>/
    Cancel a request the logged-in person sent and that is still pending.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def delete(self, request, request_id):
        connection_request = services.get_request(ActorKind.PERSON, request_id)
        services.cancel_request(request.user, connection_request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ConnectionWithAPIView(APIView):
    """
    DELETE /api/connections/with/<person_id>/
    Remove an accepted connection between the logged-in person and another.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def delete(self, request, person_id):
        other = get_object_or_404(Person, pk=person_id)
        services.remove_connection(request.user, request.user, other)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ConnectionStatusAPIView(APIView):
    """
    GET /api/connections/status/<person_id>/
    Returns {"status": "NONE" | "PENDING_SENT" | ... } from the caller's side.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request, person_id):
        other = get_object_or_404(Person, pk=person_id)
        state = services.status_of(request.user, other)
        return Response(ConnectionStatusSerializer(state).data)


class PendingIncomingAPIView(APIView):
    """GET /api/connections/pending/ - requests waiting for the caller's answer."""
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        requests_ = services.pending_incoming(request.user)
        serializer = ConnectionRequestSerializer(
            requests_, many=True, context={"request": request, "actor": request.user}
        )
        return Response(serializer.data)


class PendingOutgoingAPIView(APIView):
    """GET /api/connections/sent/ - requests the caller sent that are still pending."""
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        requests_ = services.pending_outgoing(request.user)
        serializer = ConnectionRequestSerializer(
            requests_, many=True, context={"request": request, "actor": request.user}
        )
        return Response(serializer.data)


class PersonNetworkAPIView(APIView):
    """
    GET /api/persons/<person_id>/network/
    Return {
        "type": "connections",
        "connections": [ ...PersonSerializer + "connected_at"... ]
    }

    People with a private network only show it to themselves.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request, person_id):
        person = get_object_or_404(Person, pk=person_id)
        if not services.can_view_network(request.user, person):
            return Response(
                {"detail": "This person's connections are private."},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = NetworkEntrySerializer(services.network_of(person), many=True, context={"request": request})
        return Response({"type": "connections", "connections": serializer.data})
