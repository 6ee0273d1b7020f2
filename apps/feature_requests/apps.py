from django.apps import AppConfig


class FeatureRequestsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.feature_requests'
    verbose_name = 'Feature Requests'
