"""
Consent Store

Records that the user agreed to the data-handling terms before a selfie
is captured. The record is keyed by policy version, so publishing a new
policy version invalidates every earlier consent.
"""

import json
import logging
import time
from typing import Callable, Optional

from pydantic import ValidationError

from comic_cover.client.storage import LocalStorage
from comic_cover.models.models import ConsentRecord

logger = logging.getLogger(__name__)


CONSENT_VERSION = "policy-v1.0"
CONSENT_KEY = f"consent:{CONSENT_VERSION}"


class ConsentStore:
    """Read/write the consent record; every method is safe without storage."""

    def __init__(self, storage: Optional[LocalStorage], clock: Callable[[], float] = time.time):
        self.storage = storage
        self._clock = clock

    def get(self) -> Optional[ConsentRecord]:
        """The stored record, or None when absent, unreadable or storage is unavailable."""
        if self.storage is None:
            return None
        raw = self.storage.get_item(CONSENT_KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw)
            return ConsentRecord(accepted=data["accepted"], timestamp=data["ts"])
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError):
            logger.warning("⚠️ Stored consent record is unreadable, treating as absent")
            return None

    def set(self) -> None:
        """Record acceptance now, replacing any earlier record."""
        if self.storage is None:
            return
        record = {"accepted": True, "ts": int(self._clock() * 1000)}
        self.storage.set_item(CONSENT_KEY, json.dumps(record))
        logger.info(f"✅ Consent recorded for {CONSENT_VERSION}")

    def clear(self) -> None:
        if self.storage is None:
            return
        self.storage.remove_item(CONSENT_KEY)

    def has_consent(self) -> bool:
        record = self.get()
        return bool(record and record.accepted)
