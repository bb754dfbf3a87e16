"""Tests for monime.http_client.MonimeHttpClient."""

from __future__ import annotations

import itertools
import json
import threading
import time
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import requests
import responses

from monime.cancellation import CancelToken, TimerScheduler
from monime.errors import (
    MonimeApiError,
    MonimeNetworkError,
    MonimeTimeoutError,
    RequestCancelledError,
)
from monime.http_client import (
    MonimeHttpClient,
    RequestConfig,
    RequestOptions,
    parse_retry_after,
)

from .conftest import (
    TEST_ACCESS_TOKEN,
    TEST_SPACE_ID,
    RecordingScheduler,
    api_url,
    make_config,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

OK_BODY = {"success": True, "messages": [], "result": {"id": "pot-1"}}


def _slow_callback(delay: float):
    def callback(request):
        time.sleep(delay)
        return (200, {}, json.dumps(OK_BODY))

    return callback


def _drain_workers() -> None:
    """Let abandoned slow workers finish while the mock is still active."""
    time.sleep(0.25)


# ===================================================================
# URL & header construction
# ===================================================================


class TestBuildUrl:
    def test_versioned_path(self, http: MonimeHttpClient) -> None:
        assert http.build_url("/payouts") == api_url("/payouts")

    def test_none_params_are_omitted(self, http: MonimeHttpClient) -> None:
        url = http.build_url("/payouts", {"a": "x", "b": None})
        assert url == api_url("/payouts") + "?a=x"
        assert "b=" not in url

    def test_all_none_params_leave_no_question_mark(self, http: MonimeHttpClient) -> None:
        assert http.build_url("/payouts", {"limit": None}) == api_url("/payouts")

    def test_values_are_url_encoded(self, http: MonimeHttpClient) -> None:
        url = http.build_url("/payments", {"reference": "a b&c", "limit": 10})
        assert url.endswith("?reference=a+b%26c&limit=10")

    def test_booleans_are_lowercase(self, http: MonimeHttpClient) -> None:
        url = http.build_url("/financial-accounts", {"withBalance": True})
        assert url.endswith("?withBalance=true")

    def test_trailing_slash_on_base_url_stripped(self) -> None:
        client = MonimeHttpClient(make_config(base_url="https://api.monime.test/"))
        assert client.build_url("/banks") == api_url("/banks")


class TestBuildHeaders:
    def test_auth_headers_always_present(self, http: MonimeHttpClient) -> None:
        headers = http.build_headers("GET", has_body=False)
        assert headers["Authorization"] == f"Bearer {TEST_ACCESS_TOKEN}"
        assert headers["Monime-Space-Id"] == TEST_SPACE_ID

    def test_content_type_only_with_body(self, http: MonimeHttpClient) -> None:
        assert "Content-Type" not in http.build_headers("GET", has_body=False)
        assert http.build_headers("PATCH", has_body=True)["Content-Type"] == "application/json"

    def test_post_gets_generated_idempotency_key(self) -> None:
        keys = iter(["key-1", "key-2"])
        client = MonimeHttpClient(make_config(), id_generator=lambda: next(keys))
        assert client.build_headers("POST", has_body=True)["Idempotency-Key"] == "key-1"

    def test_post_uses_supplied_idempotency_key(self, http: MonimeHttpClient) -> None:
        headers = http.build_headers("POST", has_body=True, idempotency_key="caller-key")
        assert headers["Idempotency-Key"] == "caller-key"

    @pytest.mark.parametrize("method", ["GET", "PATCH", "DELETE"])
    def test_non_post_has_no_idempotency_key(self, http: MonimeHttpClient, method: str) -> None:
        assert "Idempotency-Key" not in http.build_headers(method, has_body=False)


# ===================================================================
# Successful requests
# ===================================================================


class TestSuccess:
    @responses.activate
    def test_returns_parsed_body(self, http: MonimeHttpClient) -> None:
        responses.add(responses.GET, api_url("/payouts/pot-1"), json=OK_BODY, status=200)
        assert http.request("GET", "/payouts/pot-1") == OK_BODY

    @responses.activate
    def test_body_is_sent_as_json(self, http: MonimeHttpClient) -> None:
        responses.add(responses.POST, api_url("/payouts"), json=OK_BODY, status=201)
        http.request("POST", "/payouts", body={"amount": {"currency": "SLE", "value": 5}})

        request = responses.calls[0].request
        assert json.loads(request.body) == {"amount": {"currency": "SLE", "value": 5}}
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Authorization"] == f"Bearer {TEST_ACCESS_TOKEN}"
        assert request.headers["Monime-Space-Id"] == TEST_SPACE_ID

    @responses.activate
    def test_query_param_omission_on_the_wire(self, http: MonimeHttpClient) -> None:
        responses.add(responses.GET, api_url("/payouts"), json=OK_BODY, status=200)
        http.request("GET", "/payouts", params={"a": "x", "b": None})

        url = responses.calls[0].request.url
        assert "a=x" in url
        assert "b=" not in url and "&b" not in url

    @responses.activate
    def test_execute_accepts_request_options(self, http: MonimeHttpClient) -> None:
        responses.add(responses.DELETE, api_url("/webhooks/whk-1"), json={"success": True}, status=200)
        result = http.execute(RequestOptions(method="DELETE", path="/webhooks/whk-1"))
        assert result == {"success": True}

    def test_unknown_method_rejected(self, http: MonimeHttpClient) -> None:
        with pytest.raises(ValueError, match="Unsupported HTTP method"):
            http.request("PUT", "/payouts")


# ===================================================================
# Idempotency key stability
# ===================================================================


class TestIdempotencyKey:
    @responses.activate
    def test_same_key_on_every_retry(self, scheduler: RecordingScheduler, rng: MagicMock) -> None:
        counter = itertools.count()
        client = MonimeHttpClient(
            make_config(retries=3),
            scheduler=scheduler,
            rng=rng,
            id_generator=lambda: f"generated-{next(counter)}",
        )
        for _ in range(3):
            responses.add(responses.POST, api_url("/payouts"), status=503, json={})
        responses.add(responses.POST, api_url("/payouts"), json=OK_BODY, status=201)

        client.request("POST", "/payouts", body={"x": 1})

        keys = [call.request.headers["Idempotency-Key"] for call in responses.calls]
        assert len(keys) == 4
        assert set(keys) == {"generated-0"}

    @responses.activate
    def test_separate_calls_get_separate_keys(self, http: MonimeHttpClient) -> None:
        responses.add(responses.POST, api_url("/payouts"), json=OK_BODY, status=201)
        http.request("POST", "/payouts", body={})
        http.request("POST", "/payouts", body={})

        first, second = (c.request.headers["Idempotency-Key"] for c in responses.calls)
        assert first != second

    @responses.activate
    def test_config_idempotency_key_used(self, http: MonimeHttpClient) -> None:
        responses.add(responses.POST, api_url("/payouts"), json=OK_BODY, status=201)
        http.request("POST", "/payouts", body={}, config=RequestConfig(idempotency_key="mine"))
        assert responses.calls[0].request.headers["Idempotency-Key"] == "mine"


# ===================================================================
# Error classification
# ===================================================================


class TestErrorMapping:
    @responses.activate
    def test_error_envelope(self, http: MonimeHttpClient) -> None:
        responses.add(
            responses.GET,
            api_url("/payouts/pot-404"),
            json={
                "error": {
                    "code": 404,
                    "reason": "not_found",
                    "message": "Payout not found",
                    "details": [{"field": "id"}],
                }
            },
            status=404,
        )
        with pytest.raises(MonimeApiError) as excinfo:
            http.request("GET", "/payouts/pot-404")

        err = excinfo.value
        assert err.code == 404
        assert err.reason == "not_found"
        assert str(err) == "Payout not found"
        assert err.details == [{"field": "id"}]
        assert err.retry_after is None
        assert len(responses.calls) == 1

    @responses.activate
    def test_generic_http_error(self, http: MonimeHttpClient) -> None:
        responses.add(responses.GET, api_url("/payouts"), json={"oops": True}, status=418)
        with pytest.raises(MonimeApiError) as excinfo:
            http.request("GET", "/payouts")

        err = excinfo.value
        assert err.code == 418
        assert err.reason == "http_error"
        assert err.details == []
        assert str(err).startswith("HTTP 418")

    @responses.activate
    def test_invalid_json_on_success_status(self, http: MonimeHttpClient) -> None:
        responses.add(responses.GET, api_url("/payouts"), body="<html>ok</html>", status=200)
        with pytest.raises(MonimeApiError) as excinfo:
            http.request("GET", "/payouts")

        assert excinfo.value.reason == "invalid_json"
        assert excinfo.value.code == 200
        assert len(responses.calls) == 1

    @responses.activate
    def test_connection_error_wrapped(self, http: MonimeHttpClient) -> None:
        responses.add(
            responses.GET,
            api_url("/payouts"),
            body=requests.ConnectionError("name resolution failed"),
        )
        with pytest.raises(MonimeNetworkError) as excinfo:
            http.request("GET", "/payouts", config=RequestConfig(retries=0))

        assert isinstance(excinfo.value.cause, requests.ConnectionError)
        assert "name resolution failed" in str(excinfo.value)

    @responses.activate
    def test_transport_timeout_is_timeout_error(self, http: MonimeHttpClient) -> None:
        responses.add(responses.GET, api_url("/payouts"), body=requests.ReadTimeout("slow"))
        with pytest.raises(MonimeTimeoutError):
            http.request("GET", "/payouts")
        assert len(responses.calls) == 1


# ===================================================================
# Retry loop
# ===================================================================


class TestRetries:
    @responses.activate
    def test_503_three_times_then_success(self, scheduler: RecordingScheduler, rng: MagicMock) -> None:
        client = MonimeHttpClient(make_config(retries=3), scheduler=scheduler, rng=rng)
        for _ in range(3):
            responses.add(responses.GET, api_url("/payouts"), status=503, json={})
        responses.add(responses.GET, api_url("/payouts"), json=OK_BODY, status=200)

        assert client.request("GET", "/payouts") == OK_BODY
        assert len(responses.calls) == 4
        assert len(scheduler.sleeps) == 3

    @responses.activate
    def test_retries_exhausted_raises_last_error(self, http: MonimeHttpClient, scheduler: RecordingScheduler) -> None:
        for _ in range(3):
            responses.add(responses.GET, api_url("/payouts"), status=503, json={})
        responses.add(responses.GET, api_url("/payouts"), json=OK_BODY, status=200)

        with pytest.raises(MonimeApiError) as excinfo:
            http.request("GET", "/payouts")

        assert excinfo.value.code == 503
        assert len(responses.calls) == 3  # 1 + retries(2)
        assert len(scheduler.sleeps) == 2

    @responses.activate
    def test_400_is_not_retried(self, http: MonimeHttpClient, scheduler: RecordingScheduler) -> None:
        responses.add(responses.GET, api_url("/payouts"), status=400, json={})
        with pytest.raises(MonimeApiError):
            http.request("GET", "/payouts")
        assert len(responses.calls) == 1
        assert scheduler.sleeps == []

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    @responses.activate
    def test_retryable_statuses(self, http: MonimeHttpClient, status: int) -> None:
        responses.add(responses.GET, api_url("/payouts"), status=status, json={})
        responses.add(responses.GET, api_url("/payouts"), json=OK_BODY, status=200)
        assert http.request("GET", "/payouts") == OK_BODY
        assert len(responses.calls) == 2

    @responses.activate
    def test_per_call_retries_override(self, http: MonimeHttpClient) -> None:
        responses.add(responses.GET, api_url("/payouts"), status=500, json={})
        with pytest.raises(MonimeApiError):
            http.request("GET", "/payouts", config=RequestConfig(retries=0))
        assert len(responses.calls) == 1

    @responses.activate
    def test_exponential_backoff_with_jitter(self, http: MonimeHttpClient, scheduler: RecordingScheduler) -> None:
        for _ in range(3):
            responses.add(responses.GET, api_url("/payouts"), status=502, json={})
        with pytest.raises(MonimeApiError):
            http.request("GET", "/payouts")
        # retry_delay 0.1, backoff 2, jitter pinned at 0.25 * 0.5
        assert scheduler.sleeps == pytest.approx([0.1 + 0.125, 0.2 + 0.125])

    @responses.activate
    def test_retry_after_overrides_backoff(self, http: MonimeHttpClient, scheduler: RecordingScheduler) -> None:
        responses.add(
            responses.GET,
            api_url("/payouts"),
            status=429,
            json={"error": {"code": 429, "reason": "rate_limited", "message": "slow down", "details": []}},
            headers={"Retry-After": "2"},
        )
        responses.add(responses.GET, api_url("/payouts"), json=OK_BODY, status=200)

        assert http.request("GET", "/payouts") == OK_BODY
        assert scheduler.sleeps == [2.0]

    @responses.activate
    def test_network_errors_then_success(self, scheduler: RecordingScheduler, rng: MagicMock) -> None:
        client = MonimeHttpClient(
            make_config(timeout=1.0, retries=2, retry_delay=0.1, retry_backoff=2),
            scheduler=scheduler,
            rng=rng,
        )
        responses.add(responses.GET, api_url("/banks"), body=requests.ConnectionError("refused"))
        responses.add(responses.GET, api_url("/banks"), body=requests.ConnectionError("reset"))
        responses.add(responses.GET, api_url("/banks"), json=OK_BODY, status=200)

        assert client.request("GET", "/banks") == OK_BODY
        assert len(responses.calls) == 3
        assert scheduler.sleeps == pytest.approx([0.1 + 0.125, 0.2 + 0.125])

    @responses.activate
    def test_real_backoff_waits(self) -> None:
        client = MonimeHttpClient(make_config(timeout=1.0, retries=2, retry_delay=0.05, retry_backoff=2))
        responses.add(responses.GET, api_url("/banks"), body=requests.ConnectionError("refused"))
        responses.add(responses.GET, api_url("/banks"), body=requests.ConnectionError("reset"))
        responses.add(responses.GET, api_url("/banks"), json=OK_BODY, status=200)

        started = time.monotonic()
        assert client.request("GET", "/banks") == OK_BODY
        assert time.monotonic() - started >= 0.05 + 0.1
        assert len(responses.calls) == 3


# ===================================================================
# Timeouts and cancellation
# ===================================================================


class TestTimeoutAndCancellation:
    @responses.activate
    def test_slow_response_times_out(self, scheduler: RecordingScheduler) -> None:
        client = MonimeHttpClient(make_config(timeout=0.05, retries=2), scheduler=scheduler)
        responses.add_callback(responses.GET, api_url("/payouts"), callback=_slow_callback(0.2))

        started = time.monotonic()
        with pytest.raises(MonimeTimeoutError) as excinfo:
            client.request("GET", "/payouts")
        elapsed = time.monotonic() - started

        assert excinfo.value.timeout == 0.05
        assert excinfo.value.url == api_url("/payouts")
        assert elapsed < 0.2
        assert scheduler.sleeps == []  # timeouts are never retried
        _drain_workers()

    @responses.activate
    def test_caller_cancel_is_not_reclassified(self) -> None:
        client = MonimeHttpClient(make_config(timeout=0.05))
        responses.add_callback(responses.GET, api_url("/payouts"), callback=_slow_callback(0.2))
        token = CancelToken()
        threading.Timer(0.01, token.cancel, args=("user aborted",)).start()

        with pytest.raises(RequestCancelledError) as excinfo:
            client.request("GET", "/payouts", config=RequestConfig(cancel_token=token))

        assert excinfo.value is token.error
        assert excinfo.value.reason == "user aborted"
        assert not isinstance(excinfo.value, MonimeTimeoutError)
        _drain_workers()

    @responses.activate
    def test_per_call_timeout_override(self) -> None:
        client = MonimeHttpClient(make_config(timeout=10.0))
        responses.add_callback(responses.GET, api_url("/payouts"), callback=_slow_callback(0.2))
        with pytest.raises(MonimeTimeoutError) as excinfo:
            client.request("GET", "/payouts", config=RequestConfig(timeout=0.05))
        assert excinfo.value.timeout == 0.05
        _drain_workers()

    @responses.activate
    def test_zero_timeout_disables_timer(self) -> None:
        scheduler = TimerScheduler()
        client = MonimeHttpClient(make_config(timeout=0), scheduler=scheduler)
        responses.add_callback(responses.GET, api_url("/payouts"), callback=_slow_callback(0.05))
        assert client.request("GET", "/payouts") == OK_BODY

    @responses.activate
    def test_already_cancelled_token_sends_nothing(self, http: MonimeHttpClient) -> None:
        responses.add(responses.GET, api_url("/payouts"), json=OK_BODY, status=200)
        token = CancelToken()
        token.cancel()
        with pytest.raises(RequestCancelledError):
            http.request("GET", "/payouts", config=RequestConfig(cancel_token=token))
        assert len(responses.calls) == 0

    @responses.activate
    def test_cancel_during_backoff_wait(self) -> None:
        client = MonimeHttpClient(make_config(retries=3, retry_delay=5.0))
        responses.add(responses.GET, api_url("/payouts"), status=503, json={})
        token = CancelToken()
        threading.Timer(0.05, token.cancel).start()

        started = time.monotonic()
        with pytest.raises(RequestCancelledError):
            client.request("GET", "/payouts", config=RequestConfig(cancel_token=token))
        assert time.monotonic() - started < 2.0
        assert len(responses.calls) == 1


# ===================================================================
# Timer hygiene
# ===================================================================


class TestNoTimerLeak:
    @responses.activate
    def test_after_success(self, http: MonimeHttpClient, scheduler: RecordingScheduler) -> None:
        responses.add(responses.GET, api_url("/payouts"), json=OK_BODY, status=200)
        http.request("GET", "/payouts")
        assert scheduler.pending() == 0

    @responses.activate
    def test_after_retries_and_terminal_failure(self, http: MonimeHttpClient, scheduler: RecordingScheduler) -> None:
        responses.add(responses.GET, api_url("/payouts"), status=500, json={})
        with pytest.raises(MonimeApiError):
            http.request("GET", "/payouts")
        assert len(responses.calls) == 3
        assert scheduler.pending() == 0

    @responses.activate
    def test_after_timeout(self, scheduler: RecordingScheduler) -> None:
        client = MonimeHttpClient(make_config(timeout=0.05), scheduler=scheduler)
        responses.add_callback(responses.GET, api_url("/payouts"), callback=_slow_callback(0.2))
        with pytest.raises(MonimeTimeoutError):
            client.request("GET", "/payouts")
        assert scheduler.pending() == 0
        _drain_workers()

    @responses.activate
    def test_after_caller_cancel(self, scheduler: RecordingScheduler) -> None:
        client = MonimeHttpClient(make_config(timeout=1.0), scheduler=scheduler)
        responses.add_callback(responses.GET, api_url("/payouts"), callback=_slow_callback(0.2))
        token = CancelToken()
        threading.Timer(0.01, token.cancel).start()
        with pytest.raises(RequestCancelledError):
            client.request("GET", "/payouts", config=RequestConfig(cancel_token=token))
        assert scheduler.pending() == 0
        _drain_workers()


# ===================================================================
# Retry-After parsing
# ===================================================================


class TestParseRetryAfter:
    NOW = datetime(2025, 10, 21, 7, 28, 0, tzinfo=timezone.utc)

    def _now(self) -> datetime:
        return self.NOW

    def test_missing(self) -> None:
        assert parse_retry_after(None) is None
        assert parse_retry_after("") is None

    def test_integer_seconds(self) -> None:
        assert parse_retry_after("120") == 120.0
        assert parse_retry_after(" 0 ") == 0.0

    def test_negative_seconds_ignored(self) -> None:
        assert parse_retry_after("-5") is None

    def test_http_date_in_future(self) -> None:
        future = (self.NOW + timedelta(seconds=30)).strftime("%a, %d %b %Y %H:%M:%S GMT")
        assert parse_retry_after(future, now=self._now) == pytest.approx(30.0)

    def test_http_date_in_past(self) -> None:
        past = (self.NOW - timedelta(seconds=30)).strftime("%a, %d %b %Y %H:%M:%S GMT")
        assert parse_retry_after(past, now=self._now) is None

    def test_garbage(self) -> None:
        assert parse_retry_after("soon") is None

    @responses.activate
    def test_attached_to_api_error(self, http: MonimeHttpClient) -> None:
        responses.add(
            responses.GET,
            api_url("/payouts"),
            status=503,
            json={"busy": True},
            headers={"Retry-After": "7"},
        )
        with pytest.raises(MonimeApiError) as excinfo:
            http.request("GET", "/payouts", config=RequestConfig(retries=0))
        assert excinfo.value.retry_after == 7.0

    @responses.activate
    def test_invalid_json_carries_no_retry_after(self, http: MonimeHttpClient) -> None:
        responses.add(
            responses.GET,
            api_url("/payouts"),
            status=503,
            body="Service Unavailable",
            headers={"Retry-After": "7"},
        )
        with pytest.raises(MonimeApiError) as excinfo:
            http.request("GET", "/payouts", config=RequestConfig(retries=0))
        assert excinfo.value.reason == "invalid_json"
        assert excinfo.value.retry_after is None
