"""Dependency factories — wire the approval components from Settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from agent_orange.approval import ApprovalService, DecisionGateway, ModeStore, RequestStore
from agent_orange.notifications import (
    CredentialCache,
    DeviceNotificationClient,
    NotificationDispatcher,
    NotificationRecords,
    ProactiveEventsClient,
)
from agent_orange.persistence import Clock, RecordStore, create_record_store

from .structured_logger import get_logger

if TYPE_CHECKING:
    from agent_orange.config.settings import Settings, VoiceConfig

logger = get_logger("Factories")


def create_store(settings: Settings, clock: Clock | None = None) -> RecordStore:
    """Return the configured RecordStore backend."""
    logger.info("Creating RecordStore", backend=settings.store.backend)
    return create_record_store(settings.store.backend, settings.store.db_path, clock=clock)


def create_feed_client(
    voice: VoiceConfig,
    http_client: httpx.AsyncClient,
    provider_name: str,
    clock: Clock | None = None,
) -> ProactiveEventsClient | None:
    """Return a feed-event client, or None when client credentials are absent."""
    if not voice.feed_events_enabled:
        logger.warning("Feed events disabled: voice.client_id/client_secret not set")
        return None
    credentials = CredentialCache(
        voice.client_id,
        voice.client_secret,
        http_client,
        token_url=voice.token_url,
        clock=clock,
    )
    logger.info("Creating ProactiveEventsClient", url=voice.proactive_events_url)
    return ProactiveEventsClient(
        http_client,
        credentials,
        url=voice.proactive_events_url,
        provider_name=provider_name,
        locale=voice.locale,
        clock=clock,
    )


class ServiceContainer:
    """Holds one shared store and HTTP client plus everything built on them."""

    def __init__(
        self,
        settings: Settings,
        store: RecordStore | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.settings = settings
        self.store = store or create_store(settings, clock=clock)
        self.http_client = http_client or httpx.AsyncClient()

        self.requests = RequestStore(self.store)
        self.mode_store = ModeStore(self.store)
        self.records = NotificationRecords(self.store)

        self.device_client = DeviceNotificationClient(
            self.http_client,
            title=settings.project_name,
            locale=settings.voice.locale,
            clock=clock,
        )
        self.feed_client = create_feed_client(
            settings.voice, self.http_client, settings.project_name, clock=clock
        )
        self.dispatcher = NotificationDispatcher(
            self.mode_store, self.records, self.device_client, self.feed_client
        )

        self.service = ApprovalService(self.requests, self.mode_store, self.dispatcher)
        self.gateway = DecisionGateway(self.requests, self.records, self.device_client)
        logger.info("ServiceContainer initialized", backend=settings.store.backend)

    async def aclose(self) -> None:
        await self.http_client.aclose()
        await self.store.close()


def create_services(settings: Settings, **overrides) -> ServiceContainer:
    """Build every component in one call."""
    return ServiceContainer(settings, **overrides)
