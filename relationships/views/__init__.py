from .connection_views import (
    ConnectionRequestListAPIView,
    ConnectionRequestRespondAPIView,
    ConnectionRequestDetailAPIView,
    ConnectionWithAPIView,
    ConnectionStatusAPIView,
    PendingIncomingAPIView,
    PendingOutgoingAPIView,
    PersonNetworkAPIView,
)
from .company_connection_views import (
    CompanyConnectionRequestListAPIView,
    CompanyConnectionRespondAPIView,
    CompanyConnectionRequestDetailAPIView,
    CompanyConnectionAPIView,
    CompanyConnectionStatusAPIView,
    CompanyPendingConnectionsAPIView,
    CompanySentConnectionsAPIView,
    CompanyNetworkAPIView,
    CompanyAdminCheckAPIView,
)
from .follow_views import (
    CompanyFollowAPIView,
    FollowedCompaniesAPIView,
    CompanyFollowersAPIView,
)
