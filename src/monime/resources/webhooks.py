"""Webhook endpoint registrations.

Webhooks deliver platform events (``payment.completed``,
``payout.failed``, ...) to an HTTPS endpoint.  Deliveries can be signed
with a shared HS256 secret or with the platform's ES256 key.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from monime.http_client import RequestConfig
from monime.resources.base import ResourceModule
from monime.validation import (
    validate_create_webhook,
    validate_id,
    validate_limit,
    validate_update_webhook,
)


class WebhookModule(ResourceModule):
    base_path = "/webhooks"

    def create(self, data: Dict[str, Any], config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        """Register a webhook.

        Args:
            data: ``name``, ``url``, ``apiRelease`` and ``events`` are
                required.  ``verificationMethod`` of type ``HS256`` needs a
                32 to 256 character ``secret``.
            config: Per-call overrides.
        """
        if self.should_validate:
            validate_create_webhook(data)
        return self._request("POST", self._path(), body=data, config=config)

    def get(self, webhook_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(webhook_id, "webhook")
        return self._request("GET", self._path(webhook_id), config=config)

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

    def update(
        self,
        webhook_id: str,
        data: Dict[str, Any],
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(webhook_id, "webhook")
            validate_update_webhook(data)
        return self._request("PATCH", self._path(webhook_id), body=data, config=config)

    def delete(self, webhook_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(webhook_id, "webhook")
        return self._request("DELETE", self._path(webhook_id), config=config)
