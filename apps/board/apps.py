# apps/board/apps.py

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class BoardConfig(AppConfig):
    """Board app configuration"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.board'
    verbose_name = 'Board - Ordering & Real-time'

    def ready(self):
        logger.info("🔌 Board app ready - WebSockets enabled")
