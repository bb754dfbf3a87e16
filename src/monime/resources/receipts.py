"""Receipts issued for completed orders, with redeemable entitlements."""

from __future__ import annotations

from typing import Any, Dict, Optional

from monime.http_client import RequestConfig
from monime.resources.base import ResourceModule
from monime.validation import validate_order_number, validate_redeem_receipt


class ReceiptModule(ResourceModule):
    base_path = "/receipts"

    def get(self, order_number: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_order_number(order_number)
        return self._request("GET", self._path(order_number), config=config)

    def redeem(
        self,
        order_number: str,
        data: Dict[str, Any],
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        """Redeem some or all of a receipt's entitlements.

        Args:
            order_number: Order number the receipt was issued for.
            data: Either ``{"redeemAll": True}`` or a list of
                ``entitlements`` with ``key`` and ``units``.
            config: Per-call overrides.
        """
        if self.should_validate:
            validate_order_number(order_number)
            validate_redeem_receipt(data)
        return self._request("POST", self._path(order_number, "redeem"), body=data, config=config)
