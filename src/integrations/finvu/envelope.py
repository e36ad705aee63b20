"""
Request envelope builder.

Every Finvu call is wrapped as {"header": {"rid", "ts", "channelId"}, "body": ...}.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from src.integrations.contracts.finvu import EnvelopeHeader, RequestEnvelope

DEFAULT_CHANNEL_ID = "finsense"
REQUEST_ID_PREFIX = "11"
REQUEST_ID_RANDOM_DIGITS = 13


def generate_request_id(rng: Optional[random.Random] = None) -> str:
    # Only probabilistically unique: 10^13 possible suffixes.
    source = rng or random
    suffix = source.randrange(10**REQUEST_ID_RANDOM_DIGITS)
    return f"{REQUEST_ID_PREFIX}{suffix:0{REQUEST_ID_RANDOM_DIGITS}d}"


def generate_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T10:00:00.000Z

    Sub-millisecond remainders round up so the stamp never precedes the moment it describes.
    """
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    moment += timedelta(microseconds=(1000 - moment.microsecond % 1000) % 1000)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_envelope(
    payload: Any,
    *,
    channel_id: str = DEFAULT_CHANNEL_ID,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> RequestEnvelope:
    header = EnvelopeHeader(
        rid=generate_request_id(rng),
        ts=generate_timestamp(now),
        channel_id=channel_id,
    )
    return RequestEnvelope(header=header, body=payload)
