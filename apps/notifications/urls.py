"""
Notification polling URLs
"""

from django.urls import path

from . import views

app_name = 'notifications'

urlpatterns = [
    path('poll/', views.poll_global, name='poll_global'),
    path('brands/<str:brand_id>/poll/', views.poll_brand, name='poll_brand'),
    path('mentions/', views.poll_mentions, name='mentions'),
    path('mentions/<str:mention_id>/ack/', views.acknowledge_mention, name='ack_mention'),
    path('mentions/tickets/<str:ticket_id>/ack/', views.acknowledge_ticket_mentions, name='ack_ticket_mentions'),
    path('preferences/', views.notification_preferences, name='preferences'),
]
