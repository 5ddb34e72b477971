from __future__ import annotations

import pytest

from fintrack.domains.finance.services.abuse_guard import AbuseGuard, DenyReason

pytestmark = pytest.mark.unit


def test_limit_is_per_user():
    guard = AbuseGuard(limit="2/hour")

    assert guard.protect(1).allowed
    assert guard.protect(1).allowed
    denied = guard.protect(1)
    assert denied.is_denied()
    assert denied.is_rate_limit()
    assert denied.reason is DenyReason.RATE_LIMIT

    assert guard.protect(2).allowed


def test_blocked_user_agent_is_not_a_rate_limit():
    guard = AbuseGuard(limit="10/hour", blocked_user_agents=["python-requests", "Scrapy"])

    decision = guard.protect(1, user_agent="Mozilla/5.0 (compatible; scrapy/2.11)")

    assert decision.is_denied()
    assert not decision.is_rate_limit()
    assert decision.reason is DenyReason.BOT
    assert guard.protect(1, user_agent="Mozilla/5.0").allowed


def test_requested_cost_counts_against_limit():
    guard = AbuseGuard(limit="3/hour")

    assert guard.protect(7, requested=3).allowed
    assert guard.protect(7).is_rate_limit()


def test_disabled_guard_always_allows():
    guard = AbuseGuard(limit="1/hour", blocked_user_agents=["curl"], enabled=False)

    for _ in range(5):
        assert guard.protect(1, user_agent="curl/8").allowed


def test_init_app_reads_config(app):
    guard = AbuseGuard()
    app.config.update(
        ABUSE_GUARD_ENABLED=True,
        TRANSACTION_CREATE_LIMIT="1/minute",
        ABUSE_BLOCKED_USER_AGENTS=["bot"],
    )

    guard.init_app(app)

    assert app.extensions["abuse_guard"] is guard
    assert guard.protect(3).allowed
    assert guard.protect(3).is_rate_limit()
    assert guard.protect(4, user_agent="SomeBot/1.0").reason is DenyReason.BOT
