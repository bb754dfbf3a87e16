"""USSD one-time passcodes used to verify a customer's phone number."""

from __future__ import annotations

from typing import Any, Dict, Optional

from monime.http_client import RequestConfig
from monime.resources.base import ResourceModule
from monime.validation import validate_create_ussd_otp, validate_id, validate_limit


class UssdOtpModule(ResourceModule):
    base_path = "/ussd-otps"

    def create(self, data: Dict[str, Any], config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_create_ussd_otp(data)
        return self._request("POST", self._path(), body=data, config=config)

    def get(self, otp_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(otp_id, "ussd_otp")
        return self._request("GET", self._path(otp_id), config=config)

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

    def delete(self, otp_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(otp_id, "ussd_otp")
        return self._request("DELETE", self._path(otp_id), config=config)
