"""
URL mappings for the hospital finance API.

Paths carry no trailing slash, matching the frontend's calls.
"""
from django.urls import path, include

from .auth_views import login_view, jwt_refresh_view, jwt_logout_view
from .views import cash
from .views import health


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),
    # Finance
    path('api/cash', cash.create_cash, name='cash_create'),
    path('cash', cash.create_cash),
]
