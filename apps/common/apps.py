"""
Common app configuration for the Dispatch Dashboard
"""

from django.apps import AppConfig


class CommonConfig(AppConfig):
    """Shared middleware, decorators and logging utilities"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.common'
    verbose_name = 'Dashboard Common'
