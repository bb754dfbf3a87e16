"""Directory of payout providers: banks and mobile money operators."""

from __future__ import annotations

from typing import Any, Dict, Optional

from monime.http_client import RequestConfig
from monime.resources.base import ResourceModule
from monime.validation import validate_country_code, validate_id, validate_limit


class _ProviderDirectory(ResourceModule):
    def list(
        self,
        country: str,
        *,
        limit: Optional[int] = None,
        after: Optional[str] = None,
        config: Optional[RequestConfig] = None,
    ) -> Dict[str, Any]:
        """List providers operating in *country* (ISO 3166 alpha-2, e.g. ``"SL"``)."""
        if self.should_validate:
            validate_country_code(country)
            validate_limit(limit)
        params = {"country": country, "limit": limit, "after": after}
        return self._request("GET", self._path(), params=params, config=config)

    def get(self, provider_id: str, config: Optional[RequestConfig] = None) -> Dict[str, Any]:
        if self.should_validate:
            validate_id(provider_id, field="provider_id")
        return self._request("GET", self._path(provider_id), config=config)


class BankModule(_ProviderDirectory):
    base_path = "/banks"


class MomoModule(_ProviderDirectory):
    base_path = "/momos"
