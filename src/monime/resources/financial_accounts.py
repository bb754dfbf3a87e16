"""Financial accounts hold balances in a single currency."""

from __future__ import annotations

from typing import Any, Dict, Optional

from monime.http_client import RequestConfig
from monime.resources.base import ResourceModule
from monime.validation import (
    validate_create_financial_account,
    validate_id,
    validate_limit,
    validate_update_financial_account,
)


class FinancialAccountModule(ResourceModule):
    base_path = "/financial-accounts"

    def create(self, data: Dict[str, Any], config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_create_financial_account(data)
        return self._request("POST", self._path(), body=data, config=config)

    def get(
        self,
        account_id: str,
        *,
        with_balance: Optional[bool] = None,
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        """Fetch an account; pass ``with_balance=True`` to include its balance."""
        if self.should_validate:
            validate_id(account_id)
        return self._request(
            "GET",
            self._path(account_id),
            params={"withBalance": with_balance},
            config=config,
        )

    def list(
        self,
        *,
        uvan: Optional[str] = None,
        reference: Optional[str] = None,
        with_balance: Optional[bool] = None,
        limit: Optional[int] = None,
        after: Optional[str] = None,
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        if self.should_validate:
            validate_limit(limit)
        params = {
            "uvan": uvan,
            "reference": reference,
            "withBalance": with_balance,
            "limit": limit,
            "after": after,
        }
        return self._request("GET", self._path(), params=params, config=config)

    def update(
        self,
        account_id: str,
        data: Dict[str, Any],
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(account_id)
            validate_update_financial_account(data)
        return self._request("PATCH", self._path(account_id), body=data, config=config)
