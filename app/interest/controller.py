"""Optimistic "interested" toggle for a single event on this device.

The controller flips its local state before contacting the server so the
change is visible immediately, then either confirms it (persisting the
local record and broadcasting the change) or rolls it back and re-raises.

State machine per event::

    NOT_INTERESTED --toggle ok--> INTERESTED --toggle ok--> NOT_INTERESTED
    any            --toggle failed--> unchanged

While a request is in flight ``is_pending`` is True. A toggle() issued
during that window is ignored and returns the current state; this keeps
two overlapping requests from each rolling back to a stale snapshot.
"""
import logging
from dataclasses import dataclass

from app.interest.cache import InterestCache
from app.interest.client import ApiFailure, ApiResult, InterestApi
from app.interest.notifier import InterestChanged, InterestNotifier

logger = logging.getLogger(__name__)


class InterestSyncError(Exception):
    """The server did not accept an interest change. Local state was restored."""

    def __init__(self, event_id: int, cause: Exception, status_code: int | None = None):
        super().__init__(f"Could not update interest for event {event_id}: {cause}")
        self.event_id = event_id
        self.cause = cause
        self.status_code = status_code


@dataclass(frozen=True)
class InterestState:
    interested: bool
    count: int | None
    pending: bool


class InterestToggleController:
    """
    Keeps the interested flag and counter of one event in sync with the server.

    Args:
        event_id: Numeric event id.
        api: Client for the remote interest endpoints.
        cache: Device-local cache. A record for ``event_id`` there takes
            precedence over ``initial_interested``.
        notifier: Optional channel told about confirmed changes.
        initial_interested: Flag to start from when the cache has no record.
        initial_count: Counter to start from, or None to not track one.
    """

    def __init__(
        self,
        event_id: int,
        api: InterestApi,
        cache: InterestCache,
        notifier: InterestNotifier | None = None,
        initial_interested: bool = False,
        initial_count: int | None = None,
    ):
        self.event_id = event_id
        self.api = api
        self.cache = cache
        self.notifier = notifier

        self._interested = True if cache.is_interested(event_id) else initial_interested
        self._count = initial_count
        self._pending = False

    @property
    def is_interested(self) -> bool:
        return self._interested

    @property
    def interested_count(self) -> int | None:
        return self._count

    @property
    def is_pending(self) -> bool:
        return self._pending

    @property
    def state(self) -> InterestState:
        return InterestState(self._interested, self._count, self._pending)

    async def toggle(self) -> InterestState:
        """
        Flip the interested flag and sync it with the server.

        Returns:
            The state after the server answered.

        Raises:
            InterestSyncError: the server call failed; flag and counter are
                back to their values from before the call.
        """
        if self._pending:
            logger.debug(f"Ignoring toggle for event {self.event_id}: request in flight")
            return self.state

        device_id = self.cache.device_id()
        was_interested = self._interested
        previous_count = self._count

        # Optimistic update
        self._pending = True
        self._interested = not was_interested
        if previous_count is not None:
            self._count = previous_count - 1 if was_interested else previous_count + 1

        try:
            try:
                result = await self._send(was_interested, device_id)
            except BaseException:
                self._restore(was_interested, previous_count)
                raise

            if isinstance(result, ApiFailure):
                self._restore(was_interested, previous_count)
                raise InterestSyncError(
                    self.event_id, result.error, result.status_code
                ) from result.error

            if was_interested:
                self.cache.clear_interested(self.event_id)
            else:
                # Server count wins over the optimistic increment
                if result.interested_count is not None:
                    self._count = result.interested_count
                self.cache.mark_interested(self.event_id)

            self._notify(not was_interested)
        finally:
            self._pending = False

        return self.state

    async def _send(self, was_interested: bool, device_id: str) -> ApiResult:
        if was_interested:
            return await self.api.withdraw(self.event_id, device_id)
        return await self.api.register(self.event_id, device_id)

    def _restore(self, interested: bool, count: int | None) -> None:
        logger.info(f"Rolling back interest toggle for event {self.event_id}")
        self._interested = interested
        self._count = count

    def _notify(self, interested: bool) -> None:
        if self.notifier is not None:
            self.notifier.publish(InterestChanged(event_id=self.event_id, interested=interested))
