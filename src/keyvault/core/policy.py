"""
Client-side evaluation of artifact sharing policies.

There is no server that counts downloads or watches the clock, so every
decision made here is advisory: a client that skips :func:`check` can still
decrypt an artifact if it holds the secret. ``download_count`` is whatever
the caller observed, not an authoritative tally.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .models import DenyReason, Policy, PolicyDecision, now_millis, to_millis


def check(
    policy: Policy,
    now: datetime | int | float | None = None,
    download_count: int = 0,
    region: Optional[str] = None,
) -> PolicyDecision:
    """
    Decide whether ``policy`` admits a download.

    ``now`` may be a datetime or epoch milliseconds and defaults to the
    current time. ``region`` is the caller's region code; when it is unknown
    the region restriction cannot be evaluated and is treated as admitted.
    Never raises.
    """
    now_ms = now_millis() if now is None else to_millis(now)

    if policy.expires_at is not None and now_ms > policy.expires_at:
        return PolicyDecision.deny(DenyReason.EXPIRED)

    if policy.max_downloads is not None and download_count >= policy.max_downloads:
        return PolicyDecision.deny(DenyReason.DOWNLOAD_LIMIT_EXCEEDED)

    if policy.self_destruct and download_count >= 1:
        return PolicyDecision.deny(DenyReason.SELF_DESTRUCTED)

    if policy.allowed_countries is not None and region:
        if region.strip().upper() not in policy.allowed_countries:
            return PolicyDecision.deny(DenyReason.REGION_DENIED)

    return PolicyDecision.admit()
