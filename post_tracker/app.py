"""
Application wiring.

Builds the one store instance the view layer shares, on top of a
connected gateway:

    async with TrackerApp() as app:
        await app.store.fetch_campaigns()
"""

from typing import Optional

import httpx
import structlog

from .config import TrackerSettings, get_settings
from .infrastructure.gateway import PersistenceGateway
from .log_config import configure_logging
from .state.store import CampaignStore

logger = structlog.get_logger()


class TrackerApp:
    """Owns the gateway and store for one application session."""

    def __init__(
        self,
        settings: Optional[TrackerSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        configure_logs: bool = True,
    ):
        # Raises ConfigurationError before anything is built
        self.settings = settings or get_settings()
        if configure_logs:
            configure_logging(self.settings.log_level, self.settings.log_json)

        self.gateway = PersistenceGateway(
            self.settings.supabase_url,
            self.settings.supabase_anon_key,
            timeout=self.settings.request_timeout,
            transport=transport,
        )
        self.store = CampaignStore(
            self.gateway,
            default_campaign_id=self.settings.default_campaign_id,
        )

    async def start(self) -> "TrackerApp":
        await self.gateway.connect()
        logger.info(
            "app.started",
            default_campaign_id=self.settings.default_campaign_id,
        )
        return self

    async def stop(self) -> None:
        await self.gateway.disconnect()
        logger.info("app.stopped")

    async def __aenter__(self) -> "TrackerApp":
        return await self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
