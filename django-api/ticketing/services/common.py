"""Helpers shared by the ticketing services."""

import logging
import time
from collections.abc import Callable
from typing import TypeVar
from uuid import UUID

from django.conf import settings

from ticketing.domain.errors import InvalidIdError, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_id(id_type: Callable[[UUID], T], raw: object, kind: str) -> T:
    """Build a typed id from a raw value, raising InvalidIdError on bad input."""
    if isinstance(raw, UUID):
        return id_type(raw)
    try:
        return id_type(UUID(str(raw)))
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError(kind) from None


def with_retry(
    func: Callable[[], T],
    max_retries: int | None = None,
    initial_delay: float = 0.05,
    max_delay: float = 1.0,
    exponential_base: float = 2.0,
) -> T:
    """Run ``func`` and retry it with exponential backoff on StoreError.

    Domain errors are never retried. ``func`` must be safe to run again from
    the top, re-checking its own preconditions.
    """
    if max_retries is None:
        max_retries = getattr(settings, "TICKETING_STORE_RETRIES", 2)
    delay = initial_delay
    for attempt in range(max_retries + 1):
        try:
            return func()
        except StoreError:
            if attempt == max_retries:
                raise
            logger.warning(
                "Store call failed (attempt %d/%d), retrying in %.2fs",
                attempt + 1,
                max_retries + 1,
                delay,
            )
            time.sleep(delay)
            delay = min(delay * exponential_base, max_delay)
    raise StoreError("Max retries exceeded")
