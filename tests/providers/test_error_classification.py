"""Tests for error classification."""

import json

import httpx
import pytest

from trendme.providers.errors import (
    AuthError,
    ErrorKind,
    GenerationError,
    GenerationTimeoutError,
    NetworkError,
    ParsingError,
    QuotaError,
    classify_error,
)


class StatusError(Exception):
    """Client error carrying an HTTP status code."""

    def __init__(self, message: str, code: int):
        super().__init__(message)
        self.code = code


class TestClassifyError:
    """Tests for classify_error."""

    @pytest.mark.parametrize("message", [
        "429 Too Many Requests",
        "Quota exceeded for project",
        "RESOURCE_EXHAUSTED: rate limit",
    ])
    def test_quota_messages(self, message):
        error = classify_error(Exception(message), "op")
        assert isinstance(error, QuotaError)
        assert error.retryable

    def test_status_code_wins(self):
        assert isinstance(classify_error(StatusError("boom", 429), "op"), QuotaError)
        assert isinstance(classify_error(StatusError("boom", 403), "op"), AuthError)

    @pytest.mark.parametrize("message", ["API key not valid", "401 Unauthorized", "PERMISSION_DENIED"])
    def test_auth_is_terminal(self, message):
        error = classify_error(Exception(message), "op")
        assert isinstance(error, AuthError)
        assert not error.retryable

    def test_network_by_type(self):
        assert isinstance(classify_error(ConnectionResetError("reset"), "op"), NetworkError)
        assert isinstance(classify_error(httpx.ConnectError("refused"), "op"), NetworkError)

    def test_network_by_message(self):
        assert classify_error(Exception("Failed to fetch"), "op").kind is ErrorKind.NETWORK

    def test_timeout_by_type(self):
        error = classify_error(TimeoutError(), "op")
        assert isinstance(error, GenerationTimeoutError)
        assert error.retryable

    def test_httpx_timeout_is_timeout_not_network(self):
        assert classify_error(httpx.ReadTimeout("slow"), "op").kind is ErrorKind.TIMEOUT

    def test_parsing_is_terminal(self):
        try:
            json.loads("{not json")
        except json.JSONDecodeError as e:
            error = classify_error(e, "op")
        assert isinstance(error, ParsingError)
        assert not error.retryable

    def test_generic_fallback(self):
        error = classify_error(ValueError("something odd"), "persona")
        assert type(error) is GenerationError
        assert error.kind is ErrorKind.GENERIC
        assert error.retryable
        assert error.operation == "persona"
        assert "something odd" in str(error)

    def test_classified_errors_pass_through(self):
        original = NetworkError("op")
        assert classify_error(original, "other") is original

    def test_original_error_is_kept(self):
        cause = Exception("quota")
        assert classify_error(cause, "op").original_error is cause


class TestErrorMessages:
    """Tests for user facing messages."""

    def test_timeout_message_names_seconds(self):
        assert "timed out after 45s" in str(GenerationTimeoutError("op", 45_000))

    def test_quota_message(self):
        assert "quota" in str(QuotaError("op")).lower()
