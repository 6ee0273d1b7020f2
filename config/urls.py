"""
URL configuration for the Dispatch Dashboard.
Every endpoint proxies to the Dispatch Tickets API; nothing is stored locally.
"""

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.shortcuts import redirect
from django.urls import include, path

from apps.tickets.views import dashboard_overview


def dashboard_status(request: HttpRequest) -> JsonResponse:
    return JsonResponse({'status': 'healthy', 'service': 'dashboard'})


def root_redirect(request: HttpRequest):
    if request.session.get('dispatch_session_token'):
        return redirect('/dashboard/')
    return redirect('/login/')


urlpatterns = [
    # Authentication - magic link, connect, organization switch
    path('', include('apps.users.urls')),

    # Public CSAT rating pages
    path('rate/', include('apps.feedback.urls')),

    # Notification polling endpoints
    path('api/notifications/', include('apps.notifications.urls')),

    # Ticket endpoints and cross-brand dashboard
    path('api/', include('apps.tickets.urls')),

    # Support portal token exchange
    path('api/support/', include('apps.support.urls')),

    # Team, API keys and feature requests
    path('api/team/', include('apps.team.urls')),
    path('api/feature-requests/', include('apps.feature_requests.urls')),

    # Connected shops per brand
    path('api/brands/<str:brand_id>/ecommerce/', include('apps.ecommerce.urls')),

    path('dashboard/', dashboard_overview, name='dashboard'),
    path('status/', dashboard_status, name='dashboard_status'),

    path('', root_redirect, name='root'),
]

# ===============================================================================
# DEVELOPMENT URLS (Debug toolbar)
# ===============================================================================

if settings.DEBUG and "debug_toolbar" in settings.INSTALLED_APPS:
    import debug_toolbar  # type: ignore[import-untyped]

    urlpatterns = [path("__debug__/", include(debug_toolbar.urls)), *urlpatterns]
