from django.urls import path
from analytics.views import AdminLocationsView, AdminLoginView, AdminStatsView, LocationView

urlpatterns = [
    path('api/location', LocationView.as_view(), name='location'),
    path('api/admin/login', AdminLoginView.as_view(), name='admin-login'),
    path('api/admin/locations', AdminLocationsView.as_view(), name='admin-locations'),
    path('api/admin/stats', AdminStatsView.as_view(), name='admin-stats'),
]
