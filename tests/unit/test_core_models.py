"""Unit tests for core data models."""

from datetime import datetime, timedelta, timezone

import pytest

from keyvault.core.models import (
    ArtifactMetadata,
    OpenedArtifact,
    Policy,
    PreparedUpload,
    UploadResult,
    now_millis,
    to_millis,
)


# --- Policy construction and validation ---

def test_policy_defaults_are_unrestricted():
    policy = Policy()
    assert policy.is_unrestricted
    assert policy.to_dict() == {}
    assert policy.describe() == "no restrictions"


def test_policy_normalizes_countries():
    policy = Policy(allowed_countries=[" us", "De", "US"])
    assert policy.allowed_countries == frozenset({"US", "DE"})


def test_policy_empty_country_list_means_no_restriction():
    assert Policy(allowed_countries=[]).allowed_countries is None


def test_policy_float_expiry_is_truncated_to_millis():
    assert Policy(expires_at=1700000000000.9).expires_at == 1700000000000


@pytest.mark.parametrize(
    "kwargs",
    [
        {"expires_at": "tomorrow"},
        {"expires_at": True},
        {"expires_at": float("nan")},
        {"expires_at": 1e300},
        {"expires_at": -1e300},
        {"expires_at": 253402300800000},
        {"max_downloads": 1.5},
        {"max_downloads": True},
        {"max_downloads": -1},
        {"self_destruct": 1},
        {"allowed_countries": "US"},
        {"allowed_countries": ["US", ""]},
        {"allowed_countries": [1]},
    ],
)
def test_policy_rejects_invalid_fields(kwargs):
    with pytest.raises(ValueError):
        Policy(**kwargs)


def test_policy_dict_roundtrip():
    policy = Policy(expires_at=1, max_downloads=2, self_destruct=True, allowed_countries={"GB"})
    data = policy.to_dict()

    assert data == {
        "expiresAt": 1,
        "maxDownloads": 2,
        "selfDestruct": True,
        "allowedCountries": ["GB"],
    }
    assert Policy.from_dict(data) == policy


def test_policy_from_dict_treats_null_as_absent():
    data = {"expiresAt": None, "maxDownloads": None, "selfDestruct": None, "allowedCountries": None}
    assert Policy.from_dict(data) == Policy()


def test_policy_expiring_in():
    start = datetime(2030, 6, 1, tzinfo=timezone.utc)
    policy = Policy.expiring_in(timedelta(hours=24), now=start, max_downloads=5)

    assert policy.expires_at == to_millis(start) + 24 * 3600 * 1000
    assert policy.max_downloads == 5


def test_policy_describe():
    policy = Policy(
        expires_at=to_millis(datetime(2030, 1, 2, 3, 4, tzinfo=timezone.utc)),
        max_downloads=3,
        self_destruct=True,
        allowed_countries={"US", "CA"},
    )
    assert policy.describe() == (
        "expires 2030-01-02 03:04 UTC; max 3 downloads; self-destruct; regions CA,US"
    )


def test_policy_describe_handles_dates_before_epoch():
    policy = Policy(expires_at=to_millis(datetime(1969, 7, 20, 20, 17, tzinfo=timezone.utc)))
    assert policy.describe() == "expires 1969-07-20 20:17 UTC"


@pytest.mark.parametrize("countries", [[["US"]], [{}], [None]])
def test_policy_from_dict_rejects_unhashable_countries(countries):
    with pytest.raises(ValueError, match="allowed_countries"):
        Policy.from_dict({"allowedCountries": countries})


# --- Time helpers ---

def test_to_millis_naive_datetime_is_utc():
    naive = datetime(2030, 1, 1)
    aware = datetime(2030, 1, 1, tzinfo=timezone.utc)
    assert to_millis(naive) == to_millis(aware) == 1893456000000


def test_to_millis_passes_numbers_through():
    assert to_millis(1234) == 1234
    assert to_millis(12.9) == 12


def test_now_millis_is_current():
    before = to_millis(datetime.now(timezone.utc))
    assert before - 1000 <= now_millis() <= before + 60_000


# --- Secret-bearing results keep secrets out of repr ---

def test_reprs_do_not_leak_payloads():
    opened = OpenedArtifact(plaintext=b"TOP-SECRET-BYTES", original_name="a.txt", policy=Policy())
    prepared = PreparedUpload(ciphertext=b"CIPHERTEXT-BYTES", encoded_name="a.encrypted")
    result = UploadResult(object_id="abc", encoded_name="a.encrypted", share_url="https://x/f/abc#key=pw")

    assert "TOP-SECRET-BYTES" not in repr(opened)
    assert "CIPHERTEXT-BYTES" not in repr(prepared)
    assert "key=pw" not in repr(result)


def test_artifact_metadata_equality():
    a = ArtifactMetadata("n", b"s" * 16, b"n" * 12, Policy(max_downloads=1))
    b = ArtifactMetadata("n", b"s" * 16, b"n" * 12, Policy(max_downloads=1))
    assert a == b
    assert ArtifactMetadata("n", b"s" * 16, b"n" * 12).policy == Policy()
