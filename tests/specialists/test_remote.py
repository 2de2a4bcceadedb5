"""Tests for HTTP specialists, served by an in-process httpx transport."""

from __future__ import annotations

import json

import httpx
import pytest

from learnlens.core.errors import PayloadValidationError, SpecialistHTTPError, is_transient
from learnlens.orchestration.orchestrator import Orchestrator
from learnlens.specialists.remote import RemoteSpecialist
from learnlens.specialists.roster import remote_roster

URL = "http://scoring.test/rating"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestRemoteSpecialist:
    @pytest.mark.asyncio
    async def test_posts_records(self, learner_records):
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"averageRating": 4.0})

        async with _client(handler) as client:
            payload = await RemoteSpecialist("rating", URL, client)(learner_records)

        assert payload == {"averageRating": 4.0}
        body = seen[0]
        assert [r["learner_id"] for r in body["responses"]] == ["L1", "L2", "L3"]
        # unset optional fields are not sent
        assert body["responses"][2]["responses"][1] == {"question_id": "q2"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [429, 502, 503])
    async def test_transient_status(self, status, learner_records):
        async with _client(lambda request: httpx.Response(status)) as client:
            with pytest.raises(SpecialistHTTPError) as exc_info:
                await RemoteSpecialist("rating", URL, client)(learner_records)

        err = exc_info.value
        assert err.status_code == status
        assert is_transient(err)
        assert err.context.specialist == "rating"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 404, 500])
    async def test_permanent_status(self, status, learner_records):
        async with _client(lambda request: httpx.Response(status, text="nope")) as client:
            with pytest.raises(SpecialistHTTPError) as exc_info:
                await RemoteSpecialist("rating", URL, client)(learner_records)

        assert not is_transient(exc_info.value)
        assert exc_info.value.message == "nope"

    @pytest.mark.asyncio
    async def test_non_json_body(self, learner_records):
        async with _client(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(PayloadValidationError, match="non-JSON"):
                await RemoteSpecialist("rating", URL, client)(learner_records)


class TestRemoteRoster:
    @pytest.mark.asyncio
    async def test_recovers_from_unavailable_upstream(self, learner_records, recorder, fast_settings, no_sleep):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"averageRating": 4.5})

        async with _client(handler) as client:
            roster = remote_roster({"rating": URL}, client, fast_settings)
            orch = Orchestrator(roster, recorder, sleep=no_sleep)
            summary = await orch.execute("remote-1", learner_records)

        assert summary.report["averageRating"] == 4.5
        assert summary.results["rating"].attempts == 3
        assert recorder.get("rating").failures == 2
        # the rest of the roster is scored locally
        assert summary.report["completionRate"] == pytest.approx(2 / 3)

    @pytest.mark.asyncio
    async def test_bad_request_is_not_retried(self, learner_records, recorder, fast_settings, no_sleep):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(400)

        async with _client(handler) as client:
            roster = remote_roster({"rating": URL}, client, fast_settings)
            summary = await Orchestrator(roster, recorder, sleep=no_sleep).execute("remote-2", learner_records)

        assert calls == 1
        assert summary.report["averageRating"] == 0.0
        assert summary.unavailable == ("rating",)
