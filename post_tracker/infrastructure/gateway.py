"""
Persistence Gateway for the hosted data service.

Wraps the PostgREST API in front of the campaigns, influencers and videos
tables. One method per (entity, operation) pair; every method resolves
to a Result envelope and never raises for backend, network or decode
failures. The gateway has no knowledge of the store and never mutates
client state.
"""

from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from ..models.entities import Campaign, Influencer, InfluencerWithMetrics, Video
from ..models.payloads import (
    CampaignCreate,
    CampaignUpdate,
    InfluencerCreate,
    InfluencerUpdate,
    VideoCreate,
    VideoUpdate,
)
from .errors import ErrorKind, GatewayError, Operation, error_from_response, translate_error
from .result import Result

logger = structlog.get_logger()
T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

CAMPAIGNS = "campaigns"
INFLUENCERS = "influencers"
VIDEOS = "videos"

SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def _json_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _decode(model: type[M], row: Any) -> M:
    return model.model_validate(row)


def _decode_influencer(row: dict) -> InfluencerWithMetrics:
    """Influencer row with its embedded videos, metrics derived."""
    influencer = _decode(Influencer, row)
    videos = [_decode(Video, video) for video in row.get("videos") or []]
    return InfluencerWithMetrics.from_record(influencer, videos)


class PersistenceGateway:
    """
    Async client for the campaign tracker tables.

    Usage:
        async with PersistenceGateway(url, anon_key) as gateway:
            result = await gateway.fetch_campaigns()
            if result.success:
                print(result.data)
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the gateway.

        Args:
            url: Project URL of the data service (without /rest/v1)
            api_key: Anon key sent as apikey and bearer token
            timeout: Per-request network timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.url = url.rstrip("/")
        self.rest_url = f"{self.url}/rest/v1"
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get HTTP client, raising if not connected."""
        if self._client is None:
            raise RuntimeError("PersistenceGateway not connected. Call connect() first.")
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> "PersistenceGateway":
        """
        Open the HTTP client.

        Returns:
            Self for chaining
        """
        self._client = httpx.AsyncClient(
            base_url=self.rest_url,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=self._transport,
        )
        logger.info("gateway.connected", url=self.rest_url)
        return self

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("gateway.disconnected")

    async def __aenter__(self) -> "PersistenceGateway":
        return await self.connect()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    # -------------------------------------------------------------------------
    # Campaigns
    # -------------------------------------------------------------------------

    async def fetch_campaigns(self) -> Result[list[Campaign]]:
        """All campaigns, newest first."""
        async def action() -> list[Campaign]:
            rows = await self._request(
                "GET", CAMPAIGNS, Operation.SELECT,
                params={"select": "*", "order": "created_at.desc"},
            )
            return [_decode(Campaign, row) for row in rows or []]

        return await self._guard(CAMPAIGNS, Operation.SELECT, action)

    async def insert_campaign(self, payload: CampaignCreate) -> Result[Campaign]:
        return await self._insert(CAMPAIGNS, payload.to_row(), Campaign)

    async def update_campaign(self, campaign_id: str, changes: CampaignUpdate) -> Result[Campaign]:
        return await self._update(CAMPAIGNS, campaign_id, changes.to_row(), Campaign)

    async def delete_campaign(self, campaign_id: str) -> Result[None]:
        return await self._delete(CAMPAIGNS, campaign_id)

    # -------------------------------------------------------------------------
    # Influencers
    # -------------------------------------------------------------------------

    async def fetch_influencers_for_campaign(
        self,
        campaign_id: str,
    ) -> Result[list[InfluencerWithMetrics]]:
        """
        Influencers of one campaign with their videos, in one round trip.

        Each influencer's metrics are derived from the embedded videos
        before being handed back.
        """
        async def action() -> list[InfluencerWithMetrics]:
            rows = await self._request(
                "GET", INFLUENCERS, Operation.SELECT,
                params={
                    "select": "*,videos(*)",
                    "campaign_id": f"eq.{campaign_id}",
                    "order": "created_at.desc",
                    "videos.order": "created_at.desc",
                },
            )
            return [_decode_influencer(row) for row in rows or []]

        return await self._guard(INFLUENCERS, Operation.SELECT, action)

    async def insert_influencer(self, payload: InfluencerCreate) -> Result[Influencer]:
        return await self._insert(INFLUENCERS, payload.to_row(), Influencer)

    async def update_influencer(
        self,
        influencer_id: str,
        changes: InfluencerUpdate,
    ) -> Result[Influencer]:
        return await self._update(INFLUENCERS, influencer_id, changes.to_row(), Influencer)

    async def delete_influencer(self, influencer_id: str) -> Result[None]:
        """Delete an influencer; its videos go with it in the backing store."""
        return await self._delete(INFLUENCERS, influencer_id)

    # -------------------------------------------------------------------------
    # Videos
    # -------------------------------------------------------------------------

    async def fetch_videos_for_influencer(self, influencer_id: str) -> Result[list[Video]]:
        """Videos of one influencer, most recently posted first."""
        async def action() -> list[Video]:
            rows = await self._request(
                "GET", VIDEOS, Operation.SELECT,
                params={
                    "select": "*",
                    "influencer_id": f"eq.{influencer_id}",
                    "order": "posted_on.desc",
                },
            )
            return [_decode(Video, row) for row in rows or []]

        return await self._guard(VIDEOS, Operation.SELECT, action)

    async def insert_video(self, payload: VideoCreate) -> Result[Video]:
        return await self._insert(VIDEOS, payload.to_row(), Video)

    async def update_video(self, video_id: str, changes: VideoUpdate) -> Result[Video]:
        return await self._update(VIDEOS, video_id, changes.to_row(), Video)

    async def delete_video(self, video_id: str) -> Result[None]:
        return await self._delete(VIDEOS, video_id)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    async def _insert(self, table: str, row: dict, model: type[M]) -> Result[M]:
        async def action() -> M:
            data = await self._request(
                "POST", table, Operation.INSERT, json=row, single=True,
            )
            return _decode(model, data)

        return await self._guard(table, Operation.INSERT, action)

    async def _update(self, table: str, record_id: str, row: dict, model: type[M]) -> Result[M]:
        async def action() -> M:
            data = await self._request(
                "PATCH", table, Operation.UPDATE,
                params={"id": f"eq.{record_id}"},
                json=row,
                single=True,
            )
            return _decode(model, data)

        return await self._guard(table, Operation.UPDATE, action)

    async def _delete(self, table: str, record_id: str) -> Result[None]:
        async def action() -> None:
            deleted = await self._request(
                "DELETE", table, Operation.DELETE,
                params={"id": f"eq.{record_id}"},
                returning=True,
            )
            if not deleted:
                raise GatewayError(
                    ErrorKind.NOT_FOUND,
                    "The record no longer exists",
                )

        return await self._guard(table, Operation.DELETE, action)

    async def _request(
        self,
        method: str,
        table: str,
        operation: Operation,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
        single: bool = False,
        returning: bool = False,
    ) -> Any:
        headers = {}
        if single:
            headers["Accept"] = SINGLE_OBJECT
        if single or returning:
            headers["Prefer"] = "return=representation"

        logger.debug(
            "gateway.request",
            method=method,
            table=table,
            params=params,
        )

        response = await self.client.request(
            method,
            f"/{table}",
            params=params,
            json=json,
            headers=headers,
        )

        if response.is_error:
            raise error_from_response(
                response.status_code,
                _json_or_text(response),
                operation,
            )
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _guard(
        self,
        table: str,
        operation: Operation,
        action: Callable[[], Awaitable[T]],
    ) -> Result[T]:
        """Run a call and fold every expected failure into the envelope."""
        try:
            data = await action()
        except (GatewayError, ValidationError, httpx.HTTPError, ValueError) as exc:
            error = translate_error(exc, operation)
            logger.warning(
                "gateway.request_failed",
                table=table,
                operation=operation.value,
                kind=error.kind.value,
                code=error.code,
                error=error.message,
            )
            return Result.failure(error)

        logger.debug("gateway.request_succeeded", table=table, operation=operation.value)
        return Result.ok(data)
