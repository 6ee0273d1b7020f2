"""
Dashboard authentication URLs
"""

from django.urls import path

from . import views

app_name = 'users'

urlpatterns = [
    path('login/', views.login_view, name='login'),
    path('auth/verify/', views.auth_callback_view, name='verify'),
    path('auth/callback/', views.auth_callback_view, name='callback'),
    path('connect/', views.connect_view, name='connect'),
    path('logout/', views.logout_view, name='logout'),
    path('session/', views.session_view, name='session'),
    path('organizations/', views.organizations_view, name='organizations'),
    path('organizations/switch/', views.switch_organization_view, name='switch_organization'),
]
