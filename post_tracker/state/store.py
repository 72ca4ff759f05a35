"""
Optimistic Campaign Store.

Central mutable state for the tracker UI:
- campaigns: every campaign, newest first
- influencers: influencers of the current campaign, each owning its
  videos and carrying derived metrics
- current_campaign_id, loading, error

Every create/update/delete follows the same protocol:
1. Pre-check the target (no network call and no state change on failure)
2. Apply the intended result to local state synchronously
3. Await the gateway (the only suspension point)
4. Reconcile with the authoritative row, or roll back exactly what step 2
   did, re-deriving influencer metrics either way
5. Return the gateway's Result envelope

Videos are stored once, inside their influencer. A video id -> influencer
id index serves lookups, so there is no second copy to keep in sync.

In-flight mutations are not serialized: when two calls on one record
overlap, whichever response resolves last wins. reset() bumps an epoch
so responses that resolve after a reset are discarded.
"""

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Type, TypeVar, Union

import structlog
from pydantic import BaseModel, ValidationError

from ..infrastructure.errors import (
    ErrorKind,
    GatewayError,
    Operation,
    immutable_field,
    not_found,
    pending,
    pending_parent,
    translate_error,
)
from ..infrastructure.gateway import PersistenceGateway
from ..infrastructure.result import Result
from ..metrics.calculator import CampaignSummary, summarize_campaign
from ..models.entities import (
    Campaign,
    Influencer,
    InfluencerWithMetrics,
    Video,
    is_temp_id,
    new_temp_id,
)
from ..models.payloads import (
    IMMUTABLE_FIELDS,
    CampaignCreate,
    CampaignUpdate,
    InfluencerCreate,
    InfluencerUpdate,
    Payload,
    VideoCreate,
    VideoUpdate,
)
from .snapshot import StoreSnapshot

logger = structlog.get_logger()

Rollback = Callable[[], None]
P = TypeVar("P", bound=Payload)
R = TypeVar("R", bound=BaseModel)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _created_key(record: Campaign) -> datetime:
    created = record.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created


class CampaignStore:
    """
    Optimistic state container shared by the view layer.

    Built once at application start (see TrackerApp) and injected where
    needed. State is exposed read-only; all mutation goes through the
    action methods below.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        default_campaign_id: Optional[str] = None,
    ):
        self._gateway = gateway
        self._default_campaign_id = default_campaign_id

        self._campaigns: list[Campaign] = []
        self._influencers: list[InfluencerWithMetrics] = []
        self._video_owner: dict[str, str] = {}  # video id -> influencer id

        self._current_campaign_id: Optional[str] = default_campaign_id
        self._pending_fetches: int = 0
        self._error: Optional[str] = None

        # Bumped by reset(); responses from an older epoch are ignored
        self._epoch: int = 0

        # temp video id -> saved row (None if rolled back), recorded when the
        # owner was absent at resolution time so a later restore can settle it
        self._settled_videos: dict[str, Optional[Video]] = {}

        logger.info(
            "store.initialized",
            default_campaign_id=default_campaign_id,
        )

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------

    @property
    def campaigns(self) -> tuple[Campaign, ...]:
        return tuple(self._campaigns)

    @property
    def influencers(self) -> tuple[InfluencerWithMetrics, ...]:
        return tuple(self._influencers)

    @property
    def videos(self) -> tuple[Video, ...]:
        """Flat view over every loaded influencer's videos."""
        return tuple(
            video
            for influencer in self._influencers
            for video in influencer.videos
        )

    @property
    def current_campaign_id(self) -> Optional[str]:
        return self._current_campaign_id

    @property
    def loading(self) -> bool:
        return self._pending_fetches > 0

    @property
    def error(self) -> Optional[str]:
        return self._error

    # -------------------------------------------------------------------------
    # Plain setters
    # -------------------------------------------------------------------------

    def set_current_campaign_id(self, campaign_id: Optional[str]) -> None:
        """
        Select the campaign the influencer slice belongs to.

        Switching campaigns drops the previous campaign's influencers; the
        view layer follows up with fetch_influencers_for_campaign().
        """
        if campaign_id == self._current_campaign_id:
            return
        self._current_campaign_id = campaign_id
        self._set_influencers([])
        logger.info("store.current_campaign_changed", campaign_id=campaign_id)

    def clear_error(self) -> None:
        """Dismiss the current error."""
        self._error = None

    def reset(self) -> None:
        """
        Return every slice to its initial state.

        Safe to call at any time. Gateway responses that resolve after the
        reset are discarded instead of being reconciled into fresh state.
        """
        self._epoch += 1
        self._campaigns = []
        self._set_influencers([])
        self._settled_videos.clear()
        self._current_campaign_id = self._default_campaign_id
        self._pending_fetches = 0
        self._error = None
        logger.warning(
            "store.reset",
            epoch=self._epoch,
            current_campaign_id=self._current_campaign_id,
        )

    # -------------------------------------------------------------------------
    # Fetches (not optimistic)
    # -------------------------------------------------------------------------

    async def fetch_campaigns(self) -> Result[list[Campaign]]:
        epoch = self._begin_fetch("campaigns")
        result = await self._call(
            "fetch_campaigns", Operation.SELECT, self._gateway.fetch_campaigns,
        )
        if not self._end_fetch(epoch, "campaigns", result):
            return result

        if result.success:
            self._campaigns = list(result.data or [])
        return result

    async def fetch_influencers_for_campaign(
        self,
        campaign_id: str,
    ) -> Result[list[InfluencerWithMetrics]]:
        epoch = self._begin_fetch("influencers", campaign_id=campaign_id)
        result = await self._call(
            "fetch_influencers_for_campaign",
            Operation.SELECT,
            lambda: self._gateway.fetch_influencers_for_campaign(campaign_id),
        )
        if not self._end_fetch(epoch, "influencers", result):
            return result

        if result.success:
            if self._current_campaign_id not in (None, campaign_id):
                # The user navigated elsewhere while this was in flight
                logger.info(
                    "store.influencers_discarded",
                    campaign_id=campaign_id,
                    current_campaign_id=self._current_campaign_id,
                )
                return result
            self._current_campaign_id = campaign_id
            self._set_influencers(result.data or [])
        return result

    async def fetch_videos_for_influencer(self, influencer_id: str) -> Result[list[Video]]:
        epoch = self._begin_fetch("videos", influencer_id=influencer_id)
        result = await self._call(
            "fetch_videos_for_influencer",
            Operation.SELECT,
            lambda: self._gateway.fetch_videos_for_influencer(influencer_id),
        )
        if not self._end_fetch(epoch, "videos", result):
            return result

        if result.success:
            position = self._influencer_position(influencer_id)
            if position is None:
                logger.info(
                    "store.videos_for_unloaded_influencer",
                    influencer_id=influencer_id,
                    count=len(result.data or []),
                )
                return result
            owner = self._influencers[position]
            self._put_influencer(position, owner.with_videos(result.data or []))
        return result

    # -------------------------------------------------------------------------
    # Campaigns
    # -------------------------------------------------------------------------

    async def create_campaign(
        self,
        payload: Union[CampaignCreate, dict[str, Any]],
    ) -> Result[Campaign]:
        try:
            data = CampaignCreate.coerce(payload)
        except ValidationError as exc:
            return self._reject("create_campaign", translate_error(exc, Operation.INSERT))

        temp_id = new_temp_id()
        now = _now()
        optimistic = Campaign(id=temp_id, created_at=now, updated_at=now, **data.model_dump())

        def apply() -> Rollback:
            self._campaigns.insert(0, optimistic)
            return lambda: self._drop_campaign(temp_id)

        def reconcile(saved: Campaign) -> None:
            self._swap_campaign(temp_id, saved)

        return await self._mutate(
            "create_campaign",
            Operation.INSERT,
            apply,
            lambda: self._gateway.insert_campaign(data),
            reconcile,
            campaign_id=temp_id,
        )

    async def update_campaign(
        self,
        campaign_id: str,
        changes: Union[CampaignUpdate, dict[str, Any]],
    ) -> Result[Campaign]:
        existing = self.get_campaign_by_id(campaign_id)
        try:
            self._require(existing, "Campaign")
            parsed = self._parse_changes(CampaignUpdate, changes)
            optimistic = self._merge(Campaign, existing, parsed.changes())
        except GatewayError as error:
            return self._reject("update_campaign", error, campaign_id=campaign_id)

        def apply() -> Rollback:
            self._swap_campaign(campaign_id, optimistic)
            return lambda: self._swap_campaign(campaign_id, existing)

        def reconcile(saved: Campaign) -> None:
            self._swap_campaign(campaign_id, saved)

        return await self._mutate(
            "update_campaign",
            Operation.UPDATE,
            apply,
            lambda: self._gateway.update_campaign(campaign_id, parsed),
            reconcile,
            campaign_id=campaign_id,
        )

    async def delete_campaign(self, campaign_id: str) -> Result[None]:
        existing = self.get_campaign_by_id(campaign_id)
        try:
            self._require(existing, "Campaign")
        except GatewayError as error:
            return self._reject("delete_campaign", error, campaign_id=campaign_id)

        def apply() -> Rollback:
            self._drop_campaign(campaign_id)
            return lambda: self._restore_campaign(existing)

        def reconcile(_: None) -> None:
            if self._current_campaign_id == campaign_id:
                self._current_campaign_id = None
                self._set_influencers([])

        return await self._mutate(
            "delete_campaign",
            Operation.DELETE,
            apply,
            lambda: self._gateway.delete_campaign(campaign_id),
            reconcile,
            campaign_id=campaign_id,
        )

    # -------------------------------------------------------------------------
    # Influencers
    # -------------------------------------------------------------------------

    async def create_influencer(
        self,
        payload: Union[InfluencerCreate, dict[str, Any]],
    ) -> Result[Influencer]:
        try:
            data = InfluencerCreate.coerce(payload)
        except ValidationError as exc:
            return self._reject("create_influencer", translate_error(exc, Operation.INSERT))
        if is_temp_id(data.campaign_id):
            return self._reject(
                "create_influencer",
                pending_parent("campaign"),
                campaign_id=data.campaign_id,
            )

        temp_id = new_temp_id()
        now = _now()
        optimistic = InfluencerWithMetrics.from_record(
            Influencer(id=temp_id, created_at=now, updated_at=now, **data.model_dump())
        )
        visible = self._current_campaign_id in (None, data.campaign_id)

        def apply() -> Rollback:
            if visible:
                self._influencers.insert(0, optimistic)
            return lambda: self._drop_influencer(temp_id)

        def reconcile(saved: Influencer) -> None:
            position = self._influencer_position(temp_id)
            if position is None:
                return
            pending_entry = self._influencers[position]
            self._put_influencer(
                position,
                InfluencerWithMetrics.from_record(saved, pending_entry.videos),
            )

        return await self._mutate(
            "create_influencer",
            Operation.INSERT,
            apply,
            lambda: self._gateway.insert_influencer(data),
            reconcile,
            influencer_id=temp_id,
            campaign_id=data.campaign_id,
        )

    async def update_influencer(
        self,
        influencer_id: str,
        changes: Union[InfluencerUpdate, dict[str, Any]],
    ) -> Result[Influencer]:
        existing = self.get_influencer_by_id(influencer_id)
        try:
            self._require(existing, "Influencer")
            parsed = self._parse_changes(InfluencerUpdate, changes)
            original = existing.record()
            optimistic = self._merge(Influencer, original, parsed.changes())
        except GatewayError as error:
            return self._reject("update_influencer", error, influencer_id=influencer_id)

        def apply() -> Rollback:
            self._patch_influencer(influencer_id, optimistic)
            return lambda: self._patch_influencer(influencer_id, original)

        def reconcile(saved: Influencer) -> None:
            self._patch_influencer(influencer_id, saved)

        return await self._mutate(
            "update_influencer",
            Operation.UPDATE,
            apply,
            lambda: self._gateway.update_influencer(influencer_id, parsed),
            reconcile,
            influencer_id=influencer_id,
        )

    async def delete_influencer(self, influencer_id: str) -> Result[None]:
        """Remove an influencer together with every video it owns."""
        existing = self.get_influencer_by_id(influencer_id)
        try:
            self._require(existing, "Influencer")
        except GatewayError as error:
            return self._reject("delete_influencer", error, influencer_id=influencer_id)
        position = self._influencer_position(influencer_id)

        def apply() -> Rollback:
            self._drop_influencer(influencer_id)
            return lambda: self._restore_influencer(existing, position)

        return await self._mutate(
            "delete_influencer",
            Operation.DELETE,
            apply,
            lambda: self._gateway.delete_influencer(influencer_id),
            lambda _: self._forget_settled_videos(existing),
            influencer_id=influencer_id,
            video_count=existing.video_count,
        )

    # -------------------------------------------------------------------------
    # Videos
    # -------------------------------------------------------------------------

    async def create_video(
        self,
        payload: Union[VideoCreate, dict[str, Any]],
    ) -> Result[Video]:
        try:
            data = VideoCreate.coerce(payload)
        except ValidationError as exc:
            return self._reject("create_video", translate_error(exc, Operation.INSERT))
        if is_temp_id(data.influencer_id):
            return self._reject(
                "create_video",
                pending_parent("influencer"),
                influencer_id=data.influencer_id,
            )

        temp_id = new_temp_id()
        now = _now()
        optimistic = Video(id=temp_id, created_at=now, updated_at=now, **data.model_dump())

        def apply() -> Rollback:
            self._insert_video(data.influencer_id, optimistic, 0)
            return lambda: self._settle_video(temp_id, None)

        def reconcile(saved: Video) -> None:
            self._settle_video(temp_id, saved)

        return await self._mutate(
            "create_video",
            Operation.INSERT,
            apply,
            lambda: self._gateway.insert_video(data),
            reconcile,
            video_id=temp_id,
            influencer_id=data.influencer_id,
        )

    async def update_video(
        self,
        video_id: str,
        changes: Union[VideoUpdate, dict[str, Any]],
    ) -> Result[Video]:
        existing = self.get_video_by_id(video_id)
        try:
            self._require(existing, "Video")
            parsed = self._parse_changes(VideoUpdate, changes)
            optimistic = self._merge(Video, existing, parsed.changes())
        except GatewayError as error:
            return self._reject("update_video", error, video_id=video_id)

        def apply() -> Rollback:
            self._swap_video(video_id, optimistic)
            return lambda: self._swap_video(video_id, existing)

        def reconcile(saved: Video) -> None:
            self._swap_video(video_id, saved)

        return await self._mutate(
            "update_video",
            Operation.UPDATE,
            apply,
            lambda: self._gateway.update_video(video_id, parsed),
            reconcile,
            video_id=video_id,
        )

    async def delete_video(self, video_id: str) -> Result[None]:
        existing = self.get_video_by_id(video_id)
        try:
            self._require(existing, "Video")
        except GatewayError as error:
            return self._reject("delete_video", error, video_id=video_id)
        owner_id = self._video_owner[video_id]
        position = self.get_influencer_by_id(owner_id).video_position(video_id)

        def apply() -> Rollback:
            self._drop_video(video_id)
            return lambda: self._insert_video(owner_id, existing, position)

        return await self._mutate(
            "delete_video",
            Operation.DELETE,
            apply,
            lambda: self._gateway.delete_video(video_id),
            lambda _: None,
            video_id=video_id,
            influencer_id=owner_id,
        )

    # -------------------------------------------------------------------------
    # Lookups and derived data
    # -------------------------------------------------------------------------

    def get_campaign_by_id(self, campaign_id: str) -> Optional[Campaign]:
        position = self._campaign_position(campaign_id)
        return self._campaigns[position] if position is not None else None

    def get_influencer_by_id(self, influencer_id: str) -> Optional[InfluencerWithMetrics]:
        position = self._influencer_position(influencer_id)
        return self._influencers[position] if position is not None else None

    def get_video_by_id(self, video_id: str) -> Optional[Video]:
        owner_id = self._video_owner.get(video_id)
        if owner_id is None:
            return None
        owner = self.get_influencer_by_id(owner_id)
        if owner is None:
            return None
        position = owner.video_position(video_id)
        return owner.videos[position] if position is not None else None

    def refresh_influencer_metrics(self, influencer_id: str) -> Optional[InfluencerWithMetrics]:
        """Re-derive one influencer's metrics from its current videos."""
        position = self._influencer_position(influencer_id)
        if position is None:
            return None
        influencer = self._influencers[position]
        self._influencers[position] = influencer.with_videos(influencer.videos)
        return self._influencers[position]

    def campaign_summary(self) -> CampaignSummary:
        """Aggregates over every influencer of the current campaign."""
        return summarize_campaign(self._current_campaign_id, self._influencers)

    def snapshot(self) -> StoreSnapshot:
        snapshot = StoreSnapshot(
            campaigns=[c.model_dump(mode="json") for c in self._campaigns],
            influencers=[i.model_dump(mode="json") for i in self._influencers],
            current_campaign_id=self._current_campaign_id,
            loading=self.loading,
            error=self._error,
        )
        snapshot.checksum = snapshot.calculate_checksum()
        return snapshot

    # -------------------------------------------------------------------------
    # Protocol plumbing
    # -------------------------------------------------------------------------

    async def _mutate(
        self,
        action: str,
        operation: Operation,
        apply: Callable[[], Rollback],
        persist: Callable[[], Awaitable[Result]],
        reconcile: Callable[[Any], None],
        **context: Any,
    ) -> Result:
        epoch = self._epoch
        rollback = apply()
        logger.info("store.optimistic_applied", action=action, **context)

        result = await self._call(action, operation, persist)

        if epoch != self._epoch:
            logger.warning(
                "store.stale_response_discarded",
                action=action,
                success=result.success,
                **context,
            )
            return result

        if result.success:
            reconcile(result.data)
            self._error = None
            logger.info("store.reconciled", action=action, **context)
        else:
            rollback()
            self._error = result.error
            logger.warning(
                "store.rolled_back",
                action=action,
                kind=result.error_kind.value if result.error_kind else None,
                error=result.error,
                **context,
            )
        return result

    async def _call(
        self,
        action: str,
        operation: Operation,
        call: Callable[[], Awaitable[Result]],
    ) -> Result:
        """Await the gateway; a raising gateway still yields an envelope."""
        try:
            return await call()
        except Exception as exc:
            logger.exception("store.gateway_raised", action=action)
            return Result.failure(translate_error(exc, operation))

    def _reject(self, action: str, error: GatewayError, **context: Any) -> Result:
        logger.info(
            "store.action_rejected",
            action=action,
            kind=error.kind.value,
            error=error.message,
            **context,
        )
        return Result.failure(error)

    def _begin_fetch(self, slice_name: str, **context: Any) -> int:
        self._pending_fetches += 1
        self._error = None
        logger.debug("store.fetch_started", slice=slice_name, **context)
        return self._epoch

    def _end_fetch(self, epoch: int, slice_name: str, result: Result) -> bool:
        """Clear loading and record errors; False if a reset superseded the fetch."""
        if epoch != self._epoch:
            logger.warning("store.stale_fetch_discarded", slice=slice_name)
            return False

        self._pending_fetches = max(0, self._pending_fetches - 1)
        if result.success:
            logger.info(
                "store.fetched",
                slice=slice_name,
                count=len(result.data or []),
            )
        else:
            self._error = result.error
            logger.warning("store.fetch_failed", slice=slice_name, error=result.error)
        return True

    @staticmethod
    def _require(record: Optional[BaseModel], entity: str) -> None:
        if record is None:
            raise not_found(entity)
        if is_temp_id(record.id):
            raise pending(entity)

    @staticmethod
    def _parse_changes(model: Type[P], changes: Union[P, dict[str, Any]]) -> P:
        immutable = IMMUTABLE_FIELDS.get(model)
        if immutable and isinstance(changes, dict) and immutable in changes:
            raise immutable_field(immutable)
        try:
            parsed = model.coerce(changes)
        except ValidationError as exc:
            raise translate_error(exc, Operation.UPDATE) from exc
        if not parsed.model_fields_set:
            raise GatewayError(ErrorKind.VALIDATION, "Validation error: no changes supplied")
        return parsed

    @staticmethod
    def _merge(model: Type[R], record: BaseModel, changes: dict[str, Any]) -> R:
        """Shallow merge with a refreshed updated_at, re-validated as a whole."""
        try:
            return model.model_validate({
                **record.model_dump(),
                **changes,
                "updated_at": _now(),
            })
        except ValidationError as exc:
            raise translate_error(exc, Operation.UPDATE) from exc

    # -------------------------------------------------------------------------
    # Campaign slice helpers
    # -------------------------------------------------------------------------

    def _campaign_position(self, campaign_id: str) -> Optional[int]:
        for index, campaign in enumerate(self._campaigns):
            if campaign.id == campaign_id:
                return index
        return None

    def _drop_campaign(self, campaign_id: str) -> None:
        self._campaigns = [c for c in self._campaigns if c.id != campaign_id]

    def _swap_campaign(self, campaign_id: str, campaign: Campaign) -> None:
        position = self._campaign_position(campaign_id)
        if position is None:
            return
        self._campaigns[position] = campaign
        # A fetch may already have brought in the authoritative row
        self._campaigns = [
            c for index, c in enumerate(self._campaigns)
            if c.id != campaign.id or index == position
        ]

    def _restore_campaign(self, campaign: Campaign) -> None:
        """Re-insert keeping newest-first order by creation time."""
        if self._campaign_position(campaign.id) is not None:
            return
        created = _created_key(campaign)
        for index, other in enumerate(self._campaigns):
            if _created_key(other) < created:
                self._campaigns.insert(index, campaign)
                return
        self._campaigns.append(campaign)

    # -------------------------------------------------------------------------
    # Influencer and video slice helpers
    # -------------------------------------------------------------------------

    def _influencer_position(self, influencer_id: str) -> Optional[int]:
        for index, influencer in enumerate(self._influencers):
            if influencer.id == influencer_id:
                return index
        return None

    def _set_influencers(self, influencers: list[InfluencerWithMetrics]) -> None:
        self._influencers = list(influencers)
        self._video_owner = {
            video.id: influencer.id
            for influencer in self._influencers
            for video in influencer.videos
        }

    def _unindex(self, influencer: InfluencerWithMetrics) -> None:
        for video in influencer.videos:
            if self._video_owner.get(video.id) == influencer.id:
                del self._video_owner[video.id]

    def _index(self, influencer: InfluencerWithMetrics) -> None:
        for video in influencer.videos:
            self._video_owner[video.id] = influencer.id

    def _put_influencer(self, position: int, influencer: InfluencerWithMetrics) -> None:
        """Replace the entry at position and keep the video index in step."""
        self._unindex(self._influencers[position])
        self._influencers[position] = influencer
        self._influencers = [
            inf for index, inf in enumerate(self._influencers)
            if inf.id != influencer.id or index == position
        ]
        self._index(influencer)

    def _patch_influencer(self, influencer_id: str, record: Influencer) -> None:
        position = self._influencer_position(influencer_id)
        if position is None:
            return
        self._influencers[position] = self._influencers[position].with_record(record)

    def _drop_influencer(self, influencer_id: str) -> None:
        position = self._influencer_position(influencer_id)
        if position is None:
            return
        removed = self._influencers.pop(position)
        self._unindex(removed)

    def _restore_influencer(self, influencer: InfluencerWithMetrics, position: Optional[int]) -> None:
        if self._influencer_position(influencer.id) is not None:
            return
        if self._current_campaign_id not in (None, influencer.campaign_id):
            # The user navigated to another campaign while the delete was in flight
            logger.info(
                "store.restore_skipped",
                influencer_id=influencer.id,
                campaign_id=influencer.campaign_id,
                current_campaign_id=self._current_campaign_id,
            )
            self._forget_settled_videos(influencer)
            return
        influencer = self._apply_settled_videos(influencer)
        index = len(self._influencers) if position is None else min(position, len(self._influencers))
        self._influencers.insert(index, influencer)
        self._index(influencer)

    def _settle_video(self, temp_id: str, saved: Optional[Video]) -> None:
        """Resolve a pending video create: swap in the saved row, or drop it."""
        if temp_id not in self._video_owner:
            # Owner is out of state (e.g. its delete is in flight)
            self._settled_videos[temp_id] = saved
            return
        if saved is None:
            self._drop_video(temp_id)
        else:
            self._swap_video(temp_id, saved)

    def _apply_settled_videos(self, influencer: InfluencerWithMetrics) -> InfluencerWithMetrics:
        """Replace pending videos whose create resolved while the owner was away."""
        if not any(video.id in self._settled_videos for video in influencer.videos):
            return influencer
        videos: list[Video] = []
        for video in influencer.videos:
            if video.id not in self._settled_videos:
                videos.append(video)
                continue
            saved = self._settled_videos.pop(video.id)
            if saved is not None and all(v.id != saved.id for v in influencer.videos):
                videos.append(saved)
        return influencer.with_videos(videos)

    def _forget_settled_videos(self, influencer: InfluencerWithMetrics) -> None:
        for video in influencer.videos:
            self._settled_videos.pop(video.id, None)

    def _insert_video(self, influencer_id: str, video: Video, position: Optional[int]) -> None:
        owner_position = self._influencer_position(influencer_id)
        if owner_position is None:
            return
        owner = self._influencers[owner_position]
        if owner.video_position(video.id) is not None:
            return
        videos = list(owner.videos)
        index = len(videos) if position is None else min(position, len(videos))
        videos.insert(index, video)
        self._influencers[owner_position] = owner.with_videos(videos)
        self._video_owner[video.id] = influencer_id

    def _drop_video(self, video_id: str) -> None:
        owner_id = self._video_owner.pop(video_id, None)
        if owner_id is None:
            return
        owner_position = self._influencer_position(owner_id)
        if owner_position is None:
            return
        owner = self._influencers[owner_position]
        self._influencers[owner_position] = owner.with_videos(
            [v for v in owner.videos if v.id != video_id]
        )

    def _swap_video(self, video_id: str, video: Video) -> None:
        owner_id = self._video_owner.get(video_id)
        if owner_id is None:
            return
        owner_position = self._influencer_position(owner_id)
        if owner_position is None:
            return
        owner = self._influencers[owner_position]
        videos = [
            video if v.id == video_id else v
            for v in owner.videos
            if v.id == video_id or v.id != video.id
        ]
        self._influencers[owner_position] = owner.with_videos(videos)
        if video.id != video_id:
            del self._video_owner[video_id]
        self._video_owner[video.id] = owner_id
