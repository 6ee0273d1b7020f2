"""
Feature request URLs (mounted at /api/feature-requests/)
"""

from django.urls import path

from . import views

app_name = 'feature_requests'

urlpatterns = [
    path('', views.feature_requests, name='list'),
    path('activity/', views.feature_request_activity, name='activity'),
    path('<str:request_id>/vote/', views.feature_request_vote, name='vote'),
]
