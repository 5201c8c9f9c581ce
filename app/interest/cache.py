"""Device-local cache of the device identity and its interest records.

Two keys are kept in the underlying store:

    - ``light_church:device_id``: opaque id generated once per install.
    - ``light_church:interested_events``: JSON object mapping event ids
      (as strings) to the epoch-millisecond time interest was marked.

The interest map is read and written wholesale. Every operation tolerates
storage failures: a failed read behaves like an empty store and a failed
write is dropped, so the in-memory state of callers keeps working when
persistence is unavailable.
"""
import json
import logging
import random
import string
import time

from app.core.config import settings
from app.interest.storage import JsonFileStore, KeyValueStore

logger = logging.getLogger(__name__)

DEVICE_KEY = "light_church:device_id"
INTERESTED_KEY = "light_church:interested_events"

_BASE36 = string.digits + string.ascii_lowercase


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_device_id() -> str:
    """Build an id like ``web-1736503200000-k3j9x2a``. Not meant to be secret."""
    suffix = "".join(random.choices(_BASE36, k=7))
    return f"web-{now_ms()}-{suffix}"


class InterestCache:
    def __init__(self, store: KeyValueStore):
        self.store = store
        self._device_id: str | None = None

    @classmethod
    def from_settings(cls) -> "InterestCache":
        """Cache persisted in the JSON file named by settings.interest_storage_path."""
        return cls(JsonFileStore(settings.interest_storage_path))

    def device_id(self) -> str:
        """Return the persisted device id, creating it on first use."""
        if self._device_id:
            return self._device_id

        try:
            stored = self.store.get(DEVICE_KEY)
        except Exception as e:
            logger.debug(f"Could not read device id: {e}")
            stored = None

        if not stored:
            stored = generate_device_id()
            try:
                self.store.set(DEVICE_KEY, stored)
            except Exception as e:
                logger.debug(f"Could not persist device id: {e}")

        self._device_id = stored
        return stored

    def read_interested(self) -> dict[str, int]:
        try:
            raw = self.store.get(INTERESTED_KEY)
            if not raw:
                return {}
            data = json.loads(raw)
        except Exception as e:
            logger.debug(f"Could not read interested events: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def write_interested(self, data: dict[str, int]) -> None:
        try:
            self.store.set(INTERESTED_KEY, json.dumps(data))
        except Exception as e:
            logger.debug(f"Could not write interested events: {e}")

    def is_interested(self, event_id: int | str) -> bool:
        return str(event_id) in self.read_interested()

    def interested_event_ids(self) -> list[str]:
        return list(self.read_interested())

    def mark_interested(self, event_id: int | str, at_ms: int | None = None) -> None:
        data = self.read_interested()
        data[str(event_id)] = at_ms if at_ms is not None else now_ms()
        self.write_interested(data)

    def clear_interested(self, event_id: int | str) -> None:
        data = self.read_interested()
        data.pop(str(event_id), None)
        self.write_interested(data)
