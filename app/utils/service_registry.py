"""Process-wide services.

Built once at application startup with ``ServiceRegistry.build`` and stored on
``app.state.services``; request handlers receive the pieces through the
dependencies in ``app.utils.deps``. ``close`` releases them at shutdown.
"""
from typing import Callable

from sqlalchemy.orm import Session

from app.core.config import Settings
from app.realtime.broadcaster import RealtimeBroadcaster
from app.services.nda_signing import NdaSigningService
from app.services.nda_webhook import NdaWebhookService
from app.services.notification import NotificationService
from app.services.pandadoc import PandaDocService


class ServiceRegistry:
    def __init__(
        self,
        *,
        broadcaster: RealtimeBroadcaster,
        notification: NotificationService,
        pandadoc: PandaDocService,
        nda_template_id: str = "",
    ):
        self.broadcaster = broadcaster
        self.notification = notification
        self.pandadoc = pandadoc
        self.nda_webhook = NdaWebhookService(pandadoc, notification, broadcaster)
        self.nda_signing = NdaSigningService(pandadoc, nda_template_id)

    @classmethod
    def build(cls, settings: Settings, session_factory: Callable[[], Session]) -> "ServiceRegistry":
        broadcaster = RealtimeBroadcaster.from_settings(settings)
        return cls(
            broadcaster=broadcaster,
            notification=NotificationService(session_factory, broadcaster, max_workers=settings.NOTIFICATION_WORKERS),
            pandadoc=PandaDocService(settings),
            nda_template_id=settings.PANDADOC_NDA_TEMPLATE_ID,
        )

    async def close(self) -> None:
        await self.broadcaster.close()
        self.notification.shutdown()
