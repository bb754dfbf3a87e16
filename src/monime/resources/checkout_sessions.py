"""Hosted checkout sessions."""

from __future__ import annotations

from typing import Any, Dict, Optional

from monime.http_client import RequestConfig
from monime.resources.base import ResourceModule
from monime.validation import validate_create_checkout_session, validate_id, validate_limit


class CheckoutSessionModule(ResourceModule):
    base_path = "/checkout-sessions"

    def create(self, data: Dict[str, Any], config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        """Create a checkout session with between 1 and 16 ``lineItems``."""
        if self.should_validate:
            validate_create_checkout_session(data)
        return self._request("POST", self._path(), body=data, config=config)

    def get(self, session_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(session_id, "checkout_session")
        return self._request("GET", self._path(session_id), config=config)

    def list(
        self,
        *,
        limit: Optional[int] = None,
        after: Optional[str] = None,
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        if self.should_validate:
            validate_limit(limit)
        return self._request(
            "GET", self._path(), params={"limit": limit, "after": after}, config=config
        )

    def delete(self, session_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(session_id, "checkout_session")
        return self._request("DELETE", self._path(session_id), config=config)
