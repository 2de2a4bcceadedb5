"""Tests for roster construction."""

from __future__ import annotations

import httpx
import pytest

from learnlens.core.errors import ConfigError
from learnlens.specialists.remote import RemoteSpecialist
from learnlens.specialists.roster import (
    LOCAL_SCORERS,
    SPECIALIST_FIELDS,
    build_roster,
    default_roster,
    remote_roster,
)


class TestBuildRoster:
    def test_default_roster_order(self, fast_settings):
        roster = default_roster(fast_settings)
        assert [call.name for call in roster] == ["engagement", "completion", "rating", "mastery", "market"]

    def test_policy_from_settings(self, fast_settings):
        for call in default_roster(fast_settings):
            assert call.deadline_s == 2.0
            assert call.retry == fast_settings.retry_config()

    def test_every_scorer_has_fields(self):
        assert set(LOCAL_SCORERS) == set(SPECIALIST_FIELDS)

    def test_subset_keeps_declared_order(self, fast_settings):
        roster = build_roster(
            {"market": LOCAL_SCORERS["market"], "engagement": LOCAL_SCORERS["engagement"]},
            fast_settings,
        )
        assert [call.name for call in roster] == ["engagement", "market"]

    def test_unknown_specialist(self, fast_settings):
        with pytest.raises(ConfigError, match="sentiment"):
            build_roster({"sentiment": lambda data: {}}, fast_settings)


class TestRemoteRoster:
    @pytest.mark.asyncio
    async def test_mixes_remote_and_local(self, fast_settings):
        async with httpx.AsyncClient() as client:
            roster = remote_roster({"mastery": "http://scoring.test/mastery"}, client, fast_settings)

        by_name = {call.name: call for call in roster}
        assert isinstance(by_name["mastery"].invoke, RemoteSpecialist)
        assert by_name["rating"].invoke is LOCAL_SCORERS["rating"]

    @pytest.mark.asyncio
    async def test_unknown_url_name(self, fast_settings):
        async with httpx.AsyncClient() as client:
            with pytest.raises(ConfigError):
                remote_roster({"sentiment": "http://scoring.test/x"}, client, fast_settings)
