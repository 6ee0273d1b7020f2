"""
Public CSAT rating URLs
"""

from django.urls import path

from . import views

app_name = 'feedback'

urlpatterns = [
    path('<str:token>/', views.rate_view, name='rate'),
]
