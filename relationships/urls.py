from django.urls import path
from relationships import views


urlpatterns = [
    # Person connections API
    path('api/connections/', views.ConnectionRequestListAPIView.as_view(), name='api_connection_requests'),
    path('api/connections/pending/', views.PendingIncomingAPIView.as_view(), name='api_connections_pending'),
    path('api/connections/sent/', views.PendingOutgoingAPIView.as_view(), name='api_connections_sent'),
    path('api/connections/status/<uuid:person_id>/', views.ConnectionStatusAPIView.as_view(), name='api_connection_status'),
    path('api/connections/with/<uuid:person_id>/', views.ConnectionWithAPIView.as_view(), name='api_connection_with'),
    path('api/connections/<uuid:request_id>/', views.ConnectionRequestDetailAPIView.as_view(), name='api_connection_request_detail'),
    path('api/connections/<uuid:request_id>/respond/', views.ConnectionRequestRespondAPIView.as_view(), name='api_connection_request_respond'),
    path('api/persons/<uuid:person_id>/network/', views.PersonNetworkAPIView.as_view(), name='api_person_network'),

    # Company connections API
    path('api/companies/<uuid:company_id>/connections/', views.CompanyConnectionRequestListAPIView.as_view(), name='api_company_connection_requests'),
    path('api/companies/<uuid:company_id>/connections/pending/', views.CompanyPendingConnectionsAPIView.as_view(), name='api_company_connections_pending'),
    path('api/companies/<uuid:company_id>/connections/sent/', views.CompanySentConnectionsAPIView.as_view(), name='api_company_connections_sent'),
    path('api/companies/<uuid:company_id>/connections/<uuid:other_company_id>/', views.CompanyConnectionAPIView.as_view(), name='api_company_connection'),
    path('api/companies/<uuid:company_id>/connections/<uuid:other_company_id>/status/', views.CompanyConnectionStatusAPIView.as_view(), name='api_company_connection_status'),
    path('api/company-connections/<uuid:request_id>/', views.CompanyConnectionRequestDetailAPIView.as_view(), name='api_company_connection_request_detail'),
    path('api/company-connections/<uuid:request_id>/respond/', views.CompanyConnectionRespondAPIView.as_view(), name='api_company_connection_request_respond'),
    path('api/companies/<uuid:company_id>/network/', views.CompanyNetworkAPIView.as_view(), name='api_company_network'),
    path('api/companies/<uuid:company_id>/admins/<uuid:person_id>/', views.CompanyAdminCheckAPIView.as_view(), name='api_company_admin_check'),

    # Follow API
    path('api/companies/<uuid:company_id>/follow/', views.CompanyFollowAPIView.as_view(), name='api_company_follow'),
    path('api/companies/<uuid:company_id>/followers/', views.CompanyFollowersAPIView.as_view(), name='api_company_followers'),
    path('api/persons/me/followed-companies/', views.FollowedCompaniesAPIView.as_view(), name='api_followed_companies'),
]
