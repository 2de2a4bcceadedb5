"""Tests for the error hierarchy and the transient classifier."""

from __future__ import annotations

import errno

import httpx
import pytest

from learnlens.core.errors import (
    DeadlineExceeded,
    ErrorCategory,
    IngestError,
    LearnLensError,
    NetworkError,
    PayloadValidationError,
    RateLimitError,
    SessionError,
    SpecialistHTTPError,
    TransientError,
    UpstreamUnavailableError,
    ValidationError,
    categorize_error,
    is_transient,
)


class _StatusError(Exception):
    def __init__(self, status: int):
        super().__init__(f"HTTP {status}")
        self.status = status


class TestHierarchy:
    def test_transient_family_is_retryable(self):
        for cls in (TransientError, NetworkError, RateLimitError, UpstreamUnavailableError):
            assert cls("x").retryable is True

    def test_deadline_exceeded_keeps_timeout(self):
        err = DeadlineExceeded("too slow", timeout=30.0)
        assert err.retryable is True
        assert err.timeout == 30.0

    def test_permanent_family(self):
        for cls in (ValidationError, PayloadValidationError, IngestError, SessionError):
            assert cls("x").retryable is False

    def test_categories(self):
        assert ValidationError("x").category == ErrorCategory.VALIDATION
        assert IngestError("x").category == ErrorCategory.PARSE
        assert SessionError("x").category == ErrorCategory.ORCHESTRATION

    def test_with_context_known_and_extra_keys(self):
        err = PayloadValidationError("bad").with_context(specialist="rating", path="/tmp/x.csv")
        assert err.context.specialist == "rating"
        assert err.context.metadata["path"] == "/tmp/x.csv"

    def test_to_dict(self):
        cause = ValueError("root")
        err = NetworkError("reset", cause=cause).with_context(specialist="market")
        d = err.to_dict()
        assert d["error_type"] == "NetworkError"
        assert d["retryable"] is True
        assert d["context"]["specialist"] == "market"
        assert d["cause"] == "root"
        assert err.__cause__ is cause


class TestSpecialistHTTPError:
    @pytest.mark.parametrize("status", [429, 502, 503])
    def test_transient_statuses(self, status):
        err = SpecialistHTTPError(status)
        assert err.retryable
        assert err.context.http_status == status

    @pytest.mark.parametrize("status", [400, 404, 500])
    def test_permanent_statuses(self, status):
        assert not SpecialistHTTPError(status).retryable

    def test_default_message(self):
        assert str(SpecialistHTTPError(418)) == "specialist returned HTTP 418"


class TestIsTransient:
    def test_builtin_timeout_and_connection_errors(self):
        assert is_transient(TimeoutError())
        assert is_transient(ConnectionResetError())
        assert is_transient(ConnectionRefusedError())

    def test_httpx_transport_error(self):
        assert is_transient(httpx.ConnectError("refused"))

    def test_transient_errno(self):
        assert is_transient(OSError(errno.ENETUNREACH, "network unreachable"))

    def test_status_attribute(self):
        assert is_transient(_StatusError(429))
        assert is_transient(_StatusError(503))
        assert not is_transient(_StatusError(400))

    @pytest.mark.parametrize("message", ["Request timeout", "operation timed out", "Rate limit hit"])
    def test_message_markers(self, message):
        assert is_transient(RuntimeError(message))

    def test_everything_else_is_permanent(self):
        assert not is_transient(ValueError("engagementRate must be a number"))
        assert not is_transient(KeyError("x"))

    def test_typed_error_flag_wins_over_message(self):
        assert not is_transient(ValidationError("field timeout is missing"))


class TestCategorize:
    def test_categorize(self):
        assert categorize_error(NetworkError("x")) == ErrorCategory.NETWORK
        assert categorize_error(TimeoutError()) == ErrorCategory.NETWORK
        assert categorize_error(ValueError()) == ErrorCategory.VALIDATION
        assert categorize_error(LookupError()) == ErrorCategory.UNKNOWN

    def test_base_error_repr(self):
        assert repr(LearnLensError("boom")) == "LearnLensError('boom', category=INTERNAL)"
