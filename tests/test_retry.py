"""Tests for transient-error classification and exponential-backoff retry."""

from __future__ import annotations

import asyncio

import anthropic
import httpx
import pytest

from helpers import StatusError
from src.errors import InvalidConceptsFormatError, MalformedResponseError, TooShortError
from src.extraction.retry import is_transient_error, with_retry


class FlakyOperation:
    """Raises the queued errors in order, then returns ``result``."""

    def __init__(self, errors: list[Exception], result: str = "ok") -> None:
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.delays.append(seconds)


def _anthropic_error(cls: type[anthropic.APIStatusError], status: int) -> anthropic.APIStatusError:
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    return cls("error", response=httpx.Response(status, request=request), body=None)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestIsTransientError:
    @pytest.mark.parametrize("status", [429, 503, 529])
    def test_transient_status_codes(self, status: int) -> None:
        assert is_transient_error(StatusError(status))

    @pytest.mark.parametrize("status", [400, 401, 404, 500])
    def test_other_status_codes(self, status: int) -> None:
        assert not is_transient_error(StatusError(status, "nothing to see"))

    def test_code_attribute(self) -> None:
        exc = Exception("service unavailable")
        exc.code = 503  # type: ignore[attr-defined]
        assert is_transient_error(exc)

    def test_anthropic_rate_limit(self) -> None:
        assert is_transient_error(_anthropic_error(anthropic.RateLimitError, 429))

    def test_anthropic_overloaded(self) -> None:
        assert is_transient_error(_anthropic_error(anthropic.InternalServerError, 529))

    def test_anthropic_bad_request(self) -> None:
        assert not is_transient_error(_anthropic_error(anthropic.BadRequestError, 400))

    def test_timeout(self) -> None:
        assert is_transient_error(TimeoutError())

    @pytest.mark.parametrize(
        "message", ["HTTP 429 Too Many Requests", "503 Service Unavailable"]
    )
    def test_status_in_message(self, message: str) -> None:
        assert is_transient_error(RuntimeError(message))

    def test_plain_error(self) -> None:
        assert not is_transient_error(ValueError("bad input"))

    def test_response_errors_never_retried(self) -> None:
        assert not is_transient_error(MalformedResponseError("invalid JSON near 429"))
        assert not is_transient_error(InvalidConceptsFormatError())
        assert not is_transient_error(TooShortError())


# ---------------------------------------------------------------------------
# Retry loop
# ---------------------------------------------------------------------------


class TestWithRetry:
    def test_success_first_try(self) -> None:
        operation = FlakyOperation([])
        sleep = SleepRecorder()
        assert asyncio.run(with_retry(operation, sleep=sleep.sleep)) == "ok"
        assert operation.calls == 1
        assert sleep.delays == []

    def test_recovers_after_two_transient_failures(self) -> None:
        operation = FlakyOperation([StatusError(429), StatusError(503)], result="done")
        sleep = SleepRecorder()

        result = asyncio.run(with_retry(operation, max_attempts=3, base_delay=1.0, sleep=sleep.sleep))

        assert result == "done"
        assert operation.calls == 3
        assert sleep.delays == [1.0, 2.0]

    def test_delay_scales_with_base(self) -> None:
        operation = FlakyOperation([StatusError(429)] * 3)
        sleep = SleepRecorder()
        asyncio.run(with_retry(operation, max_attempts=4, base_delay=0.5, sleep=sleep.sleep))
        assert sleep.delays == [0.5, 1.0, 2.0]

    def test_non_transient_fails_immediately(self) -> None:
        error = ValueError("schema mismatch")
        operation = FlakyOperation([error])
        sleep = SleepRecorder()

        with pytest.raises(ValueError) as exc_info:
            asyncio.run(with_retry(operation, sleep=sleep.sleep))

        assert exc_info.value is error
        assert operation.calls == 1
        assert sleep.delays == []

    def test_exhaustion_reraises_last_error(self) -> None:
        errors = [StatusError(503), StatusError(503), StatusError(429)]
        operation = FlakyOperation(list(errors))
        sleep = SleepRecorder()

        with pytest.raises(StatusError) as exc_info:
            asyncio.run(with_retry(operation, max_attempts=3, sleep=sleep.sleep))

        assert exc_info.value is errors[-1]
        assert operation.calls == 3
        assert len(sleep.delays) == 2

    def test_single_attempt_means_no_retry(self) -> None:
        operation = FlakyOperation([StatusError(429)])
        with pytest.raises(StatusError):
            asyncio.run(with_retry(operation, max_attempts=1, sleep=SleepRecorder().sleep))
        assert operation.calls == 1
