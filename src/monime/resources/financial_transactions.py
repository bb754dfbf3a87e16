"""Read-only ledger entries recorded against financial accounts."""

from __future__ import annotations

from typing import Any, Dict, Optional

from monime.http_client import RequestConfig
from monime.resources.base import ResourceModule
from monime.validation import validate_id, validate_limit, validate_transaction_type


class FinancialTransactionModule(ResourceModule):
    base_path = "/financial-transactions"

    def get(self, transaction_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(transaction_id)
        return self._request("GET", self._path(transaction_id), config=config)

    def list(
        self,
        *,
        financial_account_id: Optional[str] = None,
        reference: Optional[str] = None,
        type: Optional[str] = None,
        limit: Optional[int] = None,
        after: Optional[str] = None,
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        """List transactions, optionally filtered to ``credit`` or ``debit``."""
        if self.should_validate:
            validate_limit(limit)
            validate_transaction_type(type)
        params = {
            "financialAccountId": financial_account_id,
            "reference": reference,
            "type": type,
            "limit": limit,
            "after": after,
        }
        return self._request("GET", self._path(), params=params, config=config)
