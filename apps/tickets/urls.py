"""
Ticket API URLs (mounted under /api/)
"""

from django.urls import path

from . import views

app_name = 'tickets'

urlpatterns = [
    path('brands/<str:brand_id>/tickets/', views.ticket_list, name='ticket_list'),
    path('brands/<str:brand_id>/tickets/bulk/', views.ticket_bulk_action, name='ticket_bulk_action'),
    path('brands/<str:brand_id>/tickets/<str:ticket_id>/', views.ticket_detail, name='ticket_detail'),
    path('brands/<str:brand_id>/tickets/<str:ticket_id>/viewed/', views.ticket_viewed, name='ticket_viewed'),
    path('dashboard/tickets/', views.dashboard_tickets, name='dashboard_tickets'),
    path('dashboard/stats/', views.dashboard_stats, name='dashboard_stats'),
]
