"""Request executor for the Monime REST API.

:class:`MonimeHttpClient` is the single place where HTTP happens.  The
resource modules build a :class:`RequestOptions` and hand it to
:meth:`MonimeHttpClient.execute`, which:

* builds the versioned URL, query string and headers (auth, content type,
  idempotency key),
* runs up to ``1 + retries`` attempts, each bounded by a timer-backed
  :class:`~monime.cancellation.CancelToken` combined with the caller's
  own token,
* parses the JSON body and maps failures onto the
  :mod:`monime.errors` taxonomy,
* backs off exponentially (with jitter) between retryable failures, or
  waits exactly as long as the server's ``Retry-After`` header asks.

The network call runs on a short-lived worker thread so the calling
thread can stop waiting the moment the timeout or the caller's token
fires.
"""

from __future__ import annotations

import json
import logging
import random
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlencode

import requests
from requests.exceptions import RequestException, Timeout

from monime.cancellation import CancelToken, TimerScheduler, any_of
from monime.config import ClientConfig
from monime.errors import (
    MonimeApiError,
    MonimeError,
    MonimeNetworkError,
    MonimeTimeoutError,
    RequestCancelledError,
    RetryDecision,
    classify,
)

logger = logging.getLogger(__name__)

API_VERSION = "v1"

HTTP_METHODS = frozenset({"GET", "POST", "PATCH", "DELETE"})

# Upper bound (exclusive) of the random jitter added to computed backoff.
_MAX_JITTER = 0.5  # seconds


@dataclass(frozen=True)
class RequestConfig:
    """Per-call overrides.  ``None`` means "use the client default"."""

    timeout: Optional[float] = None
    retries: Optional[int] = None
    cancel_token: Optional[CancelToken] = None
    idempotency_key: Optional[str] = None


@dataclass(frozen=True)
class RequestOptions:
    """Everything needed to perform one logical call."""

    method: str
    path: str
    body: Any = None
    params: Optional[Mapping[str, Any]] = None
    idempotency_key: Optional[str] = None
    config: Optional[RequestConfig] = None


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_retry_after(
    value: Optional[str],
    now: Callable[[], datetime] = _utcnow,
) -> Optional[float]:
    """Parse a ``Retry-After`` header value into a delay in seconds.

    Accepts integer seconds (``"120"``) or an HTTP date
    (``"Wed, 21 Oct 2025 07:28:00 GMT"``).  A date in the past, a negative
    number, or an unparseable value yields ``None``.
    """
    if not value:
        return None
    value = value.strip()

    try:
        seconds = int(value)
    except ValueError:
        pass
    else:
        return float(seconds) if seconds >= 0 else None

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    delay = (when - now()).total_seconds()
    return delay if delay > 0 else None


class MonimeHttpClient:
    """Authenticated, retrying HTTP executor shared by all resource modules.

    Args:
        config: Immutable client configuration.
        session: Optional pre-built :class:`requests.Session` (useful for
            custom adapters); one is created and owned otherwise.
        scheduler: Timer scheduler used for timeouts and backoff waits.
        id_generator: Callable returning a fresh idempotency key.
            Defaults to a random UUID4 string.
        rng: Random source for backoff jitter.
        clock: Returns the current aware UTC time (for ``Retry-After`` dates).
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: Optional[requests.Session] = None,
        scheduler: Optional[TimerScheduler] = None,
        id_generator: Optional[Callable[[], str]] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._scheduler = scheduler or TimerScheduler()
        self._id_generator = id_generator or (lambda: str(uuid.uuid4()))
        self._rng = rng or random.Random()
        self._clock = clock

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def should_validate(self) -> bool:
        """Whether resource modules should validate input before calling in."""
        return self._config.validate_inputs

    def __enter__(self) -> "MonimeHttpClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------

    def build_url(self, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Return ``base_url/v1/path`` plus a query string of non-``None`` params."""
        url = f"{self._config.base_url}/{API_VERSION}{path}"
        if params:
            query = urlencode(
                [(key, _query_value(value)) for key, value in params.items() if value is not None]
            )
            if query:
                url = f"{url}?{query}"
        return url

    def build_headers(
        self,
        method: str,
        has_body: bool,
        idempotency_key: Optional[str] = None,
    ) -> Dict[str, str]:
        headers = {
            "Monime-Space-Id": self._config.space_id,
            "Authorization": f"Bearer {self._config.access_token}",
            "Accept": "application/json",
            "User-Agent": self._config.user_agent,
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        if method == "POST":
            headers["Idempotency-Key"] = idempotency_key or self._id_generator()
        return headers

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        idempotency_key: Optional[str] = None,
        config: Optional[RequestConfig] = None,
    ) -> Any:
        """Shorthand for :meth:`execute` with keyword arguments."""
        return self.execute(
            RequestOptions(
                method=method,
                path=path,
                body=body,
                params=params,
                idempotency_key=idempotency_key,
                config=config,
            )
        )

    def execute(self, options: RequestOptions) -> Any:
        """Perform one logical call and return the parsed JSON body.

        Raises:
            MonimeApiError: Non-2xx response or unparseable body.
            MonimeTimeoutError: The effective timeout elapsed.
            MonimeNetworkError: Transport failure after all retries.
            RequestCancelledError: The caller's cancel token fired.
        """
        method = options.method.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {options.method!r}")

        call_config = options.config or RequestConfig()
        timeout = call_config.timeout if call_config.timeout is not None else self._config.timeout
        max_retries = call_config.retries if call_config.retries is not None else self._config.retries
        idempotency_key = options.idempotency_key or call_config.idempotency_key

        url = self.build_url(options.path, options.params)
        has_body = options.body is not None
        # Built once so a generated idempotency key is shared by every attempt.
        headers = self.build_headers(method, has_body, idempotency_key)
        data = json.dumps(options.body, separators=(",", ":")) if has_body else None

        return self._execute_with_retry(
            method,
            url,
            headers,
            data,
            timeout,
            max_retries,
            call_config.cancel_token,
        )

    # ------------------------------------------------------------------
    # Retry loop
    # ------------------------------------------------------------------

    def _execute_with_retry(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[str],
        timeout: float,
        max_retries: int,
        cancel_token: Optional[CancelToken],
    ) -> Any:
        attempts = max_retries + 1
        attempt = 0
        while True:
            attempt += 1
            logger.debug("Monime %s %s (attempt %d/%d)", method, url, attempt, attempts)
            try:
                return self._execute_request(method, url, headers, data, timeout, cancel_token)
            except (RequestCancelledError, MonimeTimeoutError) as exc:
                logger.warning("Monime %s %s aborted: %s", method, url, exc)
                raise
            except MonimeError as exc:
                decision = classify(exc)
                if not decision.retryable or attempt >= attempts:
                    logger.warning(
                        "Monime %s %s failed after %d attempt(s): %s",
                        method, url, attempt, exc,
                    )
                    raise
                delay = self.retry_delay(attempt - 1, decision)
                logger.info(
                    "Monime %s %s failed (%s), retrying in %.2fs (attempt %d/%d)",
                    method, url, exc, delay, attempt, attempts,
                )

            if self._scheduler.sleep(delay, cancel_token):
                assert cancel_token is not None
                cancel_token.raise_if_cancelled()

    def retry_delay(self, retry_index: int, decision: RetryDecision) -> float:
        """Seconds to wait before retry number ``retry_index + 1``."""
        if decision.delay_hint is not None:
            return decision.delay_hint
        base_delay = self._config.retry_delay * self._config.retry_backoff ** retry_index
        return base_delay + self._rng.random() * _MAX_JITTER

    # ------------------------------------------------------------------
    # Single attempt
    # ------------------------------------------------------------------

    def _execute_request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[str],
        timeout: float,
        cancel_token: Optional[CancelToken],
    ) -> Any:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        timer_token: Optional[CancelToken] = None
        timer = None
        if timeout > 0:
            timer_token = CancelToken()
            timer = self._scheduler.call_later(
                timeout, lambda: timer_token.cancel("timeout")
            )

        signal = any_of(timer_token, cancel_token)
        try:
            try:
                response = self._send(method, url, headers, data, timeout, signal)
            except RequestCancelledError:
                if cancel_token is not None and cancel_token.cancelled:
                    cancel_token.raise_if_cancelled()
                raise MonimeTimeoutError(timeout, url) from None
            except Timeout as exc:
                raise MonimeTimeoutError(timeout, url) from exc
            except RequestException as exc:
                raise MonimeNetworkError(f"Network error: {exc}", exc) from exc
            return self._parse_response(response)
        finally:
            if timer is not None:
                timer.cancel()
            signal.close()

    def _send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[str],
        timeout: float,
        signal: CancelToken,
    ) -> requests.Response:
        """Run the HTTP call on a worker thread until it finishes or *signal* trips."""
        outcome: Dict[str, Any] = {}
        done = threading.Event()

        def _run() -> None:
            try:
                response = self._session.request(
                    method,
                    url,
                    headers=headers,
                    data=data,
                    timeout=timeout if timeout > 0 else None,
                )
            except Exception as exc:  # re-raised on the calling thread
                outcome["error"] = exc
            else:
                if signal.cancelled:
                    response.close()
                outcome["response"] = response
            finally:
                done.set()

        unsubscribe = signal.add_callback(done.set)
        try:
            worker = threading.Thread(target=_run, name="monime-request", daemon=True)
            worker.start()
            done.wait()
        finally:
            unsubscribe()

        if "response" in outcome:
            return outcome["response"]
        if "error" in outcome:
            raise outcome["error"]
        signal.raise_if_cancelled()
        raise RuntimeError("request worker finished without an outcome")

    def _parse_response(self, response: requests.Response) -> Any:
        status = response.status_code
        try:
            data = response.json()
        except ValueError:
            raise MonimeApiError(
                f"Invalid JSON response from server: {status} {response.reason}",
                status,
                "invalid_json",
                [],
            ) from None

        if 200 <= status < 300:
            return data

        retry_after = parse_retry_after(response.headers.get("Retry-After"), self._clock)
        envelope = data.get("error") if isinstance(data, dict) else None
        if isinstance(envelope, dict):
            raise MonimeApiError(
                str(envelope.get("message", "")),
                envelope.get("code", status),
                envelope.get("reason", "http_error"),
                envelope.get("details") or [],
                retry_after,
            )
        raise MonimeApiError(
            f"HTTP {status}: {response.reason}",
            status,
            "http_error",
            [],
            retry_after,
        )


__all__ = [
    "API_VERSION",
    "MonimeHttpClient",
    "RequestConfig",
    "RequestOptions",
    "parse_retry_after",
]
