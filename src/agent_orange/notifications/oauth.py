"""Credential Cache — client-credentials bearer token for server-to-server calls."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from agent_orange.config.settings import DEFAULT_TOKEN_URL
from agent_orange.core.exceptions import UpstreamAuthorizationError
from agent_orange.persistence import Clock

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "alexa::proactive_events"
SAFETY_MARGIN_SECONDS = 300


class CredentialCache:
    """
    Process-wide cache of one OAuth access token.

    Lifecycle: empty at construction (cold start), filled lazily by the first
    :meth:`get_token`, reused while ``now < expires_at`` and replaced by a
    fresh exchange once it lapses. ``expires_at`` is the advertised lifetime
    minus a five minute margin. Nothing is persisted.
    """

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        http_client: httpx.AsyncClient,
        token_url: str = DEFAULT_TOKEN_URL,
        scope: str = DEFAULT_SCOPE,
        safety_margin: int = SAFETY_MARGIN_SECONDS,
        clock: Clock | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.http_client = http_client
        self.token_url = token_url
        self.scope = scope
        self.safety_margin = safety_margin
        self._clock = clock or time.time
        self._token: str | None = None
        self._expires_at: float = 0.0
        self._lock = asyncio.Lock()

    @property
    def expires_at(self) -> float:
        return self._expires_at

    def _is_fresh(self) -> bool:
        return self._token is not None and self._clock() < self._expires_at

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0

    async def get_token(self) -> str:
        """Return a valid token, exchanging client credentials when the cache is stale.

        Raises:
            UpstreamAuthorizationError: credentials missing or the exchange failed.
                Never retried here.
        """
        if self._is_fresh():
            return self._token
        async with self._lock:
            if self._is_fresh():
                return self._token
            return await self._refresh()

    async def _refresh(self) -> str:
        if not self.client_id or not self.client_secret:
            raise UpstreamAuthorizationError("client credentials are not configured")

        now = self._clock()
        try:
            response = await self.http_client.post(
                self.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "scope": self.scope,
                },
            )
        except httpx.HTTPError as e:
            raise UpstreamAuthorizationError(f"token exchange failed: {e}") from e

        if not response.is_success:
            raise UpstreamAuthorizationError(
                f"token exchange failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            token = data["access_token"]
            lifetime = int(data["expires_in"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamAuthorizationError(f"malformed token response: {e}") from e

        self._token = token
        self._expires_at = now + lifetime - self.safety_margin
        logger.info("Obtained feed-event access token (valid for %ss)", lifetime - self.safety_margin)
        return token
