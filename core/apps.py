from django.apps import AppConfig
import logging
from django.conf import settings


class CoreConfig(AppConfig):
    name = 'core'
    verbose_name = 'Core'

    def ready(self):
        """Log the token lifetime and upload limits on startup."""
        logger = logging.getLogger(__name__)
        access_lifetime = settings.SIMPLE_JWT.get('ACCESS_TOKEN_LIFETIME')
        logger.info(f"ACCESS TOKEN LIFETIME: {access_lifetime}")
        logger.info(f"MAX FILE UPLOAD: {settings.MAX_FILE_UPLOAD} bytes")
