"""Python client for the Monime payments API."""

from monime.cancellation import CancelToken, any_of
from monime.client import MonimeClient
from monime.config import ClientConfig, load_config
from monime.errors import (
    MonimeApiError,
    MonimeError,
    MonimeNetworkError,
    MonimeTimeoutError,
    MonimeValidationError,
    RequestCancelledError,
)
from monime.http_client import MonimeHttpClient, RequestConfig, RequestOptions

__version__ = "0.1.0"

__all__ = [
    "CancelToken",
    "ClientConfig",
    "MonimeApiError",
    "MonimeClient",
    "MonimeError",
    "MonimeHttpClient",
    "MonimeNetworkError",
    "MonimeTimeoutError",
    "MonimeValidationError",
    "RequestCancelledError",
    "RequestConfig",
    "RequestOptions",
    "any_of",
    "load_config",
]
