"""Unit tests for client-side policy evaluation."""

from datetime import datetime, timedelta, timezone

import pytest

from keyvault.core.exceptions import PolicyViolation
from keyvault.core.models import DenyReason, Policy, PolicyDecision, to_millis
from keyvault.core.policy import check

T = 1_800_000_000_000  # epoch ms


def test_unrestricted_policy_admits():
    decision = check(Policy(), now=T, download_count=10_000, region="ZZ")
    assert decision == PolicyDecision.admit()
    assert decision.admitted is True
    assert decision.reason is None


# ==============================================================================
# Expiry
# ==============================================================================

def test_expiry_boundary_before():
    assert check(Policy(expires_at=T), now=T - 1).admitted


def test_expiry_boundary_exact_instant_admits():
    assert check(Policy(expires_at=T), now=T).admitted


def test_expiry_boundary_after():
    decision = check(Policy(expires_at=T), now=T + 1)
    assert decision == PolicyDecision.deny(DenyReason.EXPIRED)


def test_expiry_accepts_datetime_now():
    expires = datetime(2030, 1, 1, tzinfo=timezone.utc)
    policy = Policy(expires_at=to_millis(expires))

    assert check(policy, now=expires - timedelta(seconds=1)).admitted
    assert check(policy, now=expires + timedelta(seconds=1)).reason is DenyReason.EXPIRED


def test_expiry_defaults_to_current_time():
    past = Policy.expiring_in(timedelta(hours=-1))
    future = Policy.expiring_in(timedelta(hours=1))
    assert check(past).reason is DenyReason.EXPIRED
    assert check(future).admitted


# ==============================================================================
# Download limits
# ==============================================================================

@pytest.mark.parametrize("count,admitted", [(0, True), (2, True), (3, False), (4, False)])
def test_max_downloads(count, admitted):
    decision = check(Policy(max_downloads=3), now=T, download_count=count)
    assert decision.admitted is admitted
    if not admitted:
        assert decision.reason is DenyReason.DOWNLOAD_LIMIT_EXCEEDED


def test_zero_max_downloads_denies_everything():
    assert check(Policy(max_downloads=0), now=T).reason is DenyReason.DOWNLOAD_LIMIT_EXCEEDED


def test_self_destruct_after_first_download():
    policy = Policy(self_destruct=True)
    assert check(policy, now=T, download_count=0).admitted
    assert check(policy, now=T, download_count=1).reason is DenyReason.SELF_DESTRUCTED


# ==============================================================================
# Regions
# ==============================================================================

def test_region_allowed_case_insensitive():
    policy = Policy(allowed_countries={"US", "de"})
    assert check(policy, now=T, region="us").admitted
    assert check(policy, now=T, region="DE").admitted


def test_region_denied():
    policy = Policy(allowed_countries={"US"})
    assert check(policy, now=T, region="FR").reason is DenyReason.REGION_DENIED


def test_unknown_region_is_admitted():
    assert check(Policy(allowed_countries={"US"}), now=T, region=None).admitted


# ==============================================================================
# Ordering and conversion to exceptions
# ==============================================================================

def test_expiry_reported_before_other_reasons():
    policy = Policy(expires_at=T, max_downloads=1, self_destruct=True, allowed_countries={"US"})
    assert check(policy, now=T + 1, download_count=5, region="FR").reason is DenyReason.EXPIRED


def test_raise_for_denial():
    PolicyDecision.admit().raise_for_denial()

    with pytest.raises(PolicyViolation) as exc_info:
        PolicyDecision.deny(DenyReason.EXPIRED).raise_for_denial()
    assert exc_info.value.reason is DenyReason.EXPIRED
    assert "expired" in str(exc_info.value)
