"""
Data models for artifact metadata, sharing policy and protocol results
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from .exceptions import PolicyViolation


class DenyReason(Enum):
    # Why a policy refused access; values are stable and safe to show users
    EXPIRED = "expired"
    DOWNLOAD_LIMIT_EXCEEDED = "download_limit_exceeded"
    SELF_DESTRUCTED = "self_destructed"
    REGION_DENIED = "region_denied"


def to_millis(moment: datetime | int | float) -> int:
    """Return epoch milliseconds for a datetime (naive values are UTC) or a number."""
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return int(moment.timestamp() * 1000)
    return int(moment)


def now_millis() -> int:
    return to_millis(datetime.now(timezone.utc))


# Range of datetime: 0001-01-01T00:00:00Z to 9999-12-31T23:59:59.999Z
MIN_EXPIRES_AT = -62135596800000
MAX_EXPIRES_AT = 253402300799999
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Policy:
    """
    Sharing policy carried inside an encoded object name.

    Every field is optional; a missing field means "no restriction".
    ``expires_at`` is an absolute timestamp in epoch milliseconds, which
    keeps the wire form interchangeable with browser clients that emit
    ``Date.now()`` values.

    Nothing here is enforced cryptographically: a client that ignores the
    policy can still decrypt with the right secret.
    """

    expires_at: Optional[int] = None
    max_downloads: Optional[int] = None
    self_destruct: bool = False
    allowed_countries: Optional[frozenset] = None

    def __post_init__(self):
        if self.expires_at is not None:
            if not _is_number(self.expires_at) or not math.isfinite(self.expires_at):
                raise ValueError("expires_at must be a finite number of epoch milliseconds")
            if not MIN_EXPIRES_AT <= self.expires_at <= MAX_EXPIRES_AT:
                raise ValueError("expires_at is outside the representable date range")
            object.__setattr__(self, "expires_at", int(self.expires_at))

        if self.max_downloads is not None:
            if not isinstance(self.max_downloads, int) or isinstance(self.max_downloads, bool):
                raise ValueError("max_downloads must be an integer")
            if self.max_downloads < 0:
                raise ValueError("max_downloads must not be negative")

        if not isinstance(self.self_destruct, bool):
            raise ValueError("self_destruct must be a boolean")

        if self.allowed_countries is not None:
            if isinstance(self.allowed_countries, str):
                raise ValueError("allowed_countries must be a collection of region codes")
            codes = set()
            for code in self.allowed_countries:
                if not isinstance(code, str) or not code.strip():
                    raise ValueError("allowed_countries entries must be non-empty strings")
                codes.add(code.strip().upper())
            # an empty allow-list is the same as no restriction
            object.__setattr__(self, "allowed_countries", frozenset(codes) or None)

    @classmethod
    def expiring_in(cls, delta: timedelta, now: datetime | None = None, **kwargs) -> "Policy":
        """Build a policy that expires ``delta`` after ``now`` (default: current time)."""
        start = now if now is not None else datetime.now(timezone.utc)
        return cls(expires_at=to_millis(start + delta), **kwargs)

    @property
    def is_unrestricted(self) -> bool:
        return (
            self.expires_at is None
            and self.max_downloads is None
            and not self.self_destruct
            and self.allowed_countries is None
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase keys of the wire format, omitting unset fields."""
        out: Dict[str, Any] = {}
        if self.expires_at is not None:
            out["expiresAt"] = self.expires_at
        if self.max_downloads is not None:
            out["maxDownloads"] = self.max_downloads
        if self.self_destruct:
            out["selfDestruct"] = True
        if self.allowed_countries is not None:
            out["allowedCountries"] = sorted(self.allowed_countries)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Policy":
        """
        Rebuild a policy from its wire dict.

        Unknown keys are ignored. ``null`` values count as absent. Ill-typed
        values raise ``ValueError``.
        """
        if not isinstance(data, dict):
            raise ValueError("policy must be a JSON object")

        countries = data.get("allowedCountries")
        if countries is not None and not isinstance(countries, list):
            raise ValueError("allowedCountries must be a list")

        self_destruct = data.get("selfDestruct")
        return cls(
            expires_at=data.get("expiresAt"),
            max_downloads=data.get("maxDownloads"),
            self_destruct=False if self_destruct is None else self_destruct,
            allowed_countries=countries,
        )

    def describe(self) -> str:
        """Short human summary, used by listings."""
        if self.is_unrestricted:
            return "no restrictions"
        parts = []
        if self.expires_at is not None:
            expiry = EPOCH + timedelta(milliseconds=self.expires_at)
            parts.append(f"expires {expiry.strftime('%Y-%m-%d %H:%M UTC')}")
        if self.max_downloads is not None:
            parts.append(f"max {self.max_downloads} downloads")
        if self.self_destruct:
            parts.append("self-destruct")
        if self.allowed_countries is not None:
            parts.append("regions " + ",".join(sorted(self.allowed_countries)))
        return "; ".join(parts)


@dataclass(frozen=True)
class ArtifactMetadata:
    """Decoded form of an encoded object name."""

    original_name: str
    salt: bytes
    nonce: bytes
    policy: Policy = field(default_factory=Policy)


@dataclass(frozen=True)
class PolicyDecision:
    admitted: bool
    reason: Optional[DenyReason] = None

    @classmethod
    def admit(cls) -> "PolicyDecision":
        return cls(admitted=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "PolicyDecision":
        return cls(admitted=False, reason=reason)

    def raise_for_denial(self) -> None:
        """Raise :class:`PolicyViolation` if this decision is a deny."""
        if not self.admitted:
            raise PolicyViolation(self.reason)


@dataclass(frozen=True)
class ShareLocator:
    object_id: str
    # kept out of repr so a stray log line never carries it
    secret: str = field(repr=False)


@dataclass(frozen=True)
class PreparedUpload:
    """Output of the upload half of the protocol, ready for a blob store."""

    ciphertext: bytes = field(repr=False)
    encoded_name: str


@dataclass(frozen=True)
class OpenedArtifact:
    """Decrypted artifact; lives in memory only and is never persisted back."""

    plaintext: bytes = field(repr=False)
    original_name: str
    policy: Policy


@dataclass(frozen=True)
class UploadResult:
    object_id: str
    encoded_name: str
    share_url: str = field(repr=False)


@dataclass(frozen=True)
class ArtifactListing:
    object_id: str
    original_name: str
    size: int
    created_at: Optional[datetime]
    policy: Policy

