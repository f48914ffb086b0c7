from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.authentication import SessionAuthentication, BasicAuthentication
from django.shortcuts import get_object_or_404
from relationships.models import Company
from relationships.permissions import IsCompanyAdmin
from relationships.serializers import CompanyFollowSerializer, PersonSerializer
from relationships import services


class CompanyFollowAPIView(APIView):
    """
        API endpoint for following a company.

        Methods:
        - GET: Whether the logged-in person follows the company, plus its follower count.
        - POST: Follow the company. Following twice is fine (200 the second time).
        - DELETE: Unfollow the company. Always 204, followed or not.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request, company_id):
        company = get_object_or_404(Company, pk=company_id)
        return Response({
            "following": services.is_following(request.user, company),
            "follower_count": services.follower_count(company),
        })

    def post(self, request, company_id):
        company = get_object_or_404(Company, pk=company_id)
        edge, created = services.follow(request.user, company)
        return Response(
            CompanyFollowSerializer(edge).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def delete(self, request, company_id):
        company = get_object_or_404(Company, pk=company_id)
        services.unfollow(request.user, company)
        return Response(status=status.HTTP_204_NO_CONTENT)


class FollowedCompaniesAPIView(APIView):
    """
    GET /api/persons/me/followed-companies/
    Return {
        "type": "followed_companies",
        "follows": [ ...CompanyFollowSerializer... ]
    }
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        follows = services.followed_companies(request.user)
        serializer = CompanyFollowSerializer(follows, many=True)
        return Response({"type": "followed_companies", "follows": serializer.data})


class CompanyFollowersAPIView(APIView):
    """GET /api/companies/<company_id>/followers/ - admins only."""
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated, IsCompanyAdmin]

    def get(self, request, company_id):
        company = get_object_or_404(Company, pk=company_id)
        followers = [edge.person for edge in services.company_followers(company)]
        serializer = PersonSerializer(followers, many=True)
        return Response({"type": "followers", "followers": serializer.data})
