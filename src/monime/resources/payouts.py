"""Payouts: disbursements from a financial account to a bank account,
mobile money wallet or Monime wallet.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from monime.http_client import RequestConfig
from monime.resources.base import ResourceModule
from monime.validation import (
    validate_create_payout,
    validate_id,
    validate_limit,
    validate_update_payout,
)


class PayoutModule(ResourceModule):
    """Create, inspect and manage payouts.

    Example::

        client.payouts.create({
            "amount": {"currency": "SLE", "value": 1000},
            "destination": {"type": "momo", "providerId": "m17", "phoneNumber": "+23276000000"},
        })
    """

    base_path = "/payouts"

    def create(self, data: Dict[str, Any], config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        """Create a payout.

        Retries of this call reuse the same ``Idempotency-Key``, so a payout
        is never sent twice because of a transient failure.  Supply
        ``config.idempotency_key`` to also deduplicate across process
        restarts.

        Raises:
            MonimeValidationError: If *data* fails validation.
            MonimeApiError: If the API rejects the payout.
        """
        if self.should_validate:
            validate_create_payout(data)
        return self._request("POST", self._path(), body=data, config=config)

    def get(self, payout_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(payout_id, "payout")
        return self._request("GET", self._path(payout_id), config=config)

    def list(
        self,
        *,
        status: Optional[str] = None,
        source_financial_account_id: Optional[str] = None,
        source_transaction_reference: Optional[str] = None,
        destination_transaction_reference: Optional[str] = None,
        limit: Optional[int] = None,
        after: Optional[str] = None,
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        if self.should_validate:
            validate_limit(limit)
        params = {
            "status": status,
            "sourceFinancialAccountId": source_financial_account_id,
            "sourceTransactionReference": source_transaction_reference,
            "destinationTransactionReference": destination_transaction_reference,
            "limit": limit,
            "after": after,
        }
        return self._request("GET", self._path(), params=params, config=config)

    def update(
        self,
        payout_id: str,
        data: Dict[str, Any],
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(payout_id, "payout")
            validate_update_payout(data)
        return self._request("PATCH", self._path(payout_id), body=data, config=config)

    def delete(self, payout_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(payout_id, "payout")
        return self._request("DELETE", self._path(payout_id), config=config)
