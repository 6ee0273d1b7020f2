"""
Users app configuration for the Dispatch Dashboard
"""

from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Session and authentication against the Dispatch API"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.users'
    verbose_name = 'Dashboard Users'
