"""
API client app configuration for the Dispatch Dashboard
"""

from django.apps import AppConfig


class ApiClientConfig(AppConfig):
    """Dispatch Tickets API integration"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.api_client'
    verbose_name = 'Dispatch API Client'
