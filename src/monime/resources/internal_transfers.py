"""Transfers between two financial accounts in the same space."""

from __future__ import annotations

from typing import Any, Dict, Optional

from monime.http_client import RequestConfig
from monime.resources.base import ResourceModule
from monime.validation import (
    validate_create_internal_transfer,
    validate_id,
    validate_limit,
    validate_update_internal_transfer,
)


class InternalTransferModule(ResourceModule):
    base_path = "/internal-transfers"

    def create(self, data: Dict[str, Any], config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_create_internal_transfer(data)
        return self._request("POST", self._path(), body=data, config=config)

    def get(self, transfer_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(transfer_id, "internal_transfer")
        return self._request("GET", self._path(transfer_id), config=config)

    def list(
        self,
        *,
        status: Optional[str] = None,
        source_financial_account_id: Optional[str] = None,
        destination_financial_account_id: Optional[str] = None,
        financial_transaction_reference: Optional[str] = None,
        limit: Optional[int] = None,
        after: Optional[str] = None,
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        if self.should_validate:
            validate_limit(limit)
        params = {
            "status": status,
            "sourceFinancialAccountId": source_financial_account_id,
            "destinationFinancialAccountId": destination_financial_account_id,
            "financialTransactionReference": financial_transaction_reference,
            "limit": limit,
            "after": after,
        }
        return self._request("GET", self._path(), params=params, config=config)

    def update(
        self,
        transfer_id: str,
        data: Dict[str, Any],
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(transfer_id, "internal_transfer")
            validate_update_internal_transfer(data)
        return self._request("PATCH", self._path(transfer_id), body=data, config=config)

    def delete(self, transfer_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(transfer_id, "internal_transfer")
        return self._request("DELETE", self._path(transfer_id), config=config)
