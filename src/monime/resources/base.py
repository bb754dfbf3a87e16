"""Shared plumbing for the per-resource modules."""

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import quote

from monime.http_client import MonimeHttpClient, RequestConfig


class ResourceModule:
    """Base class holding the shared :class:`MonimeHttpClient`.

    Subclasses set :attr:`base_path` (e.g. ``"/payouts"``) and implement
    their operations in terms of :meth:`_request`.
    """

    base_path = ""

    def __init__(self, http_client: MonimeHttpClient) -> None:
        self._http = http_client

    @property
    def should_validate(self) -> bool:
        return self._http.should_validate

    def _path(self, *segments: str) -> str:
        """Join *segments* onto :attr:`base_path`, URL-quoting each one."""
        path = self.base_path
        for segment in segments:
            path += "/" + quote(str(segment), safe="")
        return path

    def _request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        config: Optional[RequestConfig] = None,
    ) -> Any:
        return self._http.request(method, path, body=body, params=params, config=config)


__all__ = ["ResourceModule"]
