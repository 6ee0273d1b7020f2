"""
Support portal URLs (mounted at /api/support/)
"""

from django.urls import path

from . import views

app_name = 'support'

urlpatterns = [
    path('token/', views.support_token, name='token'),
    path('tickets/', views.support_tickets, name='tickets'),
    path('tickets/<str:ticket_id>/', views.support_ticket_detail, name='ticket_detail'),
    path('tickets/<str:ticket_id>/comments/', views.support_ticket_comment, name='ticket_comment'),
    path('attachments/', views.support_attachment_upload, name='attachments'),
]
