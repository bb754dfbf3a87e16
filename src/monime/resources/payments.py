"""Payments collected through payment codes, checkout sessions and other channels.

Payments are created by the platform, so only read and update are exposed.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from monime.http_client import RequestConfig
from monime.resources.base import ResourceModule
from monime.validation import validate_id, validate_limit, validate_update_payment


class PaymentModule(ResourceModule):
    base_path = "/payments"

    def get(self, payment_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(payment_id, "payment")
        return self._request("GET", self._path(payment_id), config=config)

    def list(
        self,
        *,
        order_number: Optional[str] = None,
        financial_account_id: Optional[str] = None,
        financial_transaction_reference: Optional[str] = None,
        limit: Optional[int] = None,
        after: Optional[str] = None,
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        if self.should_validate:
            validate_limit(limit)
        params = {
            "orderNumber": order_number,
            "financialAccountId": financial_account_id,
            "financialTransactionReference": financial_transaction_reference,
            "limit": limit,
            "after": after,
        }
        return self._request("GET", self._path(), params=params, config=config)

    def update(
        self,
        payment_id: str,
        data: Dict[str, Any],
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        """Update a payment's ``name`` or ``metadata``."""
        if self.should_validate:
            validate_id(payment_id, "payment")
            validate_update_payment(data)
        return self._request("PATCH", self._path(payment_id), body=data, config=config)
