"""Payment codes: USSD codes customers dial to pay a fixed or open amount.

Calls ``/v1/payment-codes``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from monime.http_client import RequestConfig
from monime.resources.base import ResourceModule
from monime.validation import (
    validate_create_payment_code,
    validate_id,
    validate_limit,
    validate_update_payment_code,
)


class PaymentCodeModule(ResourceModule):
    base_path = "/payment-codes"

    def create(self, data: Dict[str, Any], config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        """Create a payment code.

        Args:
            data: Payment code fields (``name`` is required; ``mode``,
                ``amount``, ``duration``, ``authorizedProviders`` and the
                rest are optional).
            config: Per-call overrides (timeout, retries, cancel token,
                idempotency key).

        Raises:
            MonimeValidationError: If *data* fails validation.
            MonimeApiError: If the API rejects the request.
        """
        if self.should_validate:
            validate_create_payment_code(data)
        return self._request("POST", self._path(), body=data, config=config)

    def get(self, payment_code_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(payment_code_id, "payment_code")
        return self._request("GET", self._path(payment_code_id), config=config)

    def list(
        self,
        *,
        ussd_code: Optional[str] = None,
        mode: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        after: Optional[str] = None,
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        """List payment codes, newest first.  Pass ``after`` to page."""
        if self.should_validate:
            validate_limit(limit)
        params = {
            "ussd_code": ussd_code,
            "mode": mode,
            "status": status,
            "limit": limit,
            "after": after,
        }
        return self._request("GET", self._path(), params=params, config=config)

    def update(
        self,
        payment_code_id: str,
        data: Dict[str, Any],
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(payment_code_id, "payment_code")
            validate_update_payment_code(data)
        return self._request("PATCH", self._path(payment_code_id), body=data, config=config)

    def delete(self, payment_code_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(payment_code_id, "payment_code")
        return self._request("DELETE", self._path(payment_code_id), config=config)
