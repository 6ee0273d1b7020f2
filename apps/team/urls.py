"""
Team API URLs (mounted at /api/team/)
"""

from django.urls import path

from . import views

app_name = 'team'

urlpatterns = [
    path('members/', views.team_members, name='members'),
    path('members/<str:member_id>/', views.team_member_detail, name='member_detail'),
    path('members/<str:member_id>/brands/', views.team_member_brands, name='member_brands'),
    path('members/<str:member_id>/resend-invite/', views.team_resend_invite, name='resend_invite'),
    path('invites/', views.team_invite, name='invite'),
    path('organization/', views.organization, name='organization'),
    path('api-keys/', views.api_keys, name='api_keys'),
    path('api-keys/<str:key_id>/', views.api_key_detail, name='api_key_detail'),
]
