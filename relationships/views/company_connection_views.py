from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.authentication import SessionAuthentication, BasicAuthentication
from django.shortcuts import get_object_or_404
from relationships import errors, services
from relationships.models import Company, Person, ActorKind
from relationships.permissions import IsCompanyAdmin, can_act_for
from relationships.serializers import (
    NetworkEntrySerializer,
    ConnectionRequestSerializer,
    ConnectionStatusSerializer,
    RespondSerializer,
    SendCompanyConnectionRequestSerializer,
)

# The acting company always comes from the URL; there is no "current
# company" kept in the session.


class CompanyConnectionRequestListAPIView(APIView):
    """
    POST /api/companies/<company_id>/connections/
    An owner/admin of <company_id> asks another company to connect.

    Example request:
    {
        "target_company_id": "b81c...",
        "note": "Interested in a supply partnership"
    }
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request, company_id):
        serializer = SendCompanyConnectionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        acting_company = get_object_or_404(Company, pk=company_id)
        target = get_object_or_404(Company, pk=serializer.validated_data["target_company_id"])
        connection_request = services.send_request(
            request.user,
            acting_company,
            target,
            notes=serializer.validated_data["note"],
        )
        return Response(
            ConnectionRequestSerializer(connection_request, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )


class CompanyConnectionRespondAPIView(APIView):
    """
    POST /api/company-connections/<request_id>/respond/
    Body: {"decision": "accept" | "decline"}. The caller must administer the
    addressee company.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request, request_id):
        serializer = RespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        connection_request = services.get_request(ActorKind.ORGANIZATION, request_id)
        connection_request = services.respond_to_request(
            request.user, connection_request, serializer.validated_data["decision"]
        )
        return Response(ConnectionRequestSerializer(connection_request, context={"request": request}).data)


class CompanyConnectionRequestDetailAPIView(APIView):
    """
    DELETE /api/company-connections/<request_id>/
    Cancel a pending request; the caller must administer the requesting company.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def delete(self, request, request_id):
        connection_request = services.get_request(ActorKind.ORGANIZATION, request_id)
        services.cancel_request(request.user, connection_request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CompanyConnectionAPIView(APIView):
    """
    DELETE /api/companies/<company_id>/connections/<other_company_id>/
    Remove the accepted connection between the two companies.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def delete(self, request, company_id, other_company_id):
        acting_company = get_object_or_404(Company, pk=company_id)
        other = get_object_or_404(Company, pk=other_company_id)
        if not can_act_for(request.user, acting_company):
            raise errors.Unauthorized()
        services.remove_connection(request.user, acting_company, other)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CompanyConnectionStatusAPIView(APIView):
    """
    GET /api/companies/<company_id>/connections/<other_company_id>/status/
    Returns {"status": ...} as seen by <company_id>.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated, IsCompanyAdmin]

    def get(self, request, company_id, other_company_id):
        acting_company = get_object_or_404(Company, pk=company_id)
        other = get_object_or_404(Company, pk=other_company_id)
        state = services.status_of(acting_company, other)
        return Response(ConnectionStatusSerializer(state).data)


class CompanyPendingConnectionsAPIView(APIView):
    """GET /api/companies/<company_id>/connections/pending/ - incoming requests, with requester info."""
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated, IsCompanyAdmin]

    def get(self, request, company_id):
        company = get_object_or_404(Company, pk=company_id)
        serializer = ConnectionRequestSerializer(
            services.pending_incoming(company),
            many=True,
            context={"request": request, "actor": company},
        )
        return Response(serializer.data)


class CompanySentConnectionsAPIView(APIView):
    """GET /api/companies/<company_id>/connections/sent/ - outgoing requests, with addressee info."""
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated, IsCompanyAdmin]

    def get(self, request, company_id):
        company = get_object_or_404(Company, pk=company_id)
        serializer = ConnectionRequestSerializer(
            services.pending_outgoing(company),
            many=True,
            context={"request": request, "actor": company},
        )
        return Response(serializer.data)


class CompanyNetworkAPIView(APIView):
    """
    GET /api/companies/<company_id>/network/
    Return {
        "type": "connections",
        "connections": [ ...CompanySerializer + "connected_at"... ]
    }
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request, company_id):
        company = get_object_or_404(Company, pk=company_id)
        serializer = NetworkEntrySerializer(services.network_of(company), many=True, context={"request": request})
        return Response({"type": "connections", "connections": serializer.data})


class CompanyAdminCheckAPIView(APIView):
    """
    GET /api/companies/<company_id>/admins/<person_id>/
    Returns {"is_admin": true|false}. Unknown people or companies are simply false.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request, company_id, person_id):
        person = Person.objects.filter(pk=person_id).first()
        return Response({"is_admin": can_act_for(person, company_id)})
