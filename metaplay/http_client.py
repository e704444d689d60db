"""Authenticated HTTP access to Metaplay services."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import requests

log = logging.getLogger(__name__)

_METHODS_WITH_BODY = {"POST", "PUT", "DELETE"}
_SUPPORTED_METHODS = {"GET"} | _METHODS_WITH_BODY


class RequestError(Exception):
    """An HTTP request failed or its response could not be used."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HttpClient:
    """HTTP client bound to a base URL, sending a bearer token with each request."""

    def __init__(self, access_token: str, base_url: str, app_version: str) -> None:
        self.access_token = access_token
        self.base_url = base_url
        self.session = requests.Session()
        self.session.headers["Authorization"] = f"Bearer {access_token}"
        self.session.headers["X-Application-Name"] = f"MetaplayCLI/{app_version}"

    def _full_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        base = self.base_url.rstrip("/")
        return f"{base}{url}" if url.startswith("/") else f"{base}/{url}"

    def request(self, method: str, url: str, body: Any = None, as_text: bool = False) -> Any:
        """Send a request and return the decoded JSON body, or the text with ``as_text``."""
        method = method.upper()
        if method not in _SUPPORTED_METHODS:
            raise ValueError(f"HTTP request method '{method}' not implemented")

        kwargs = {}
        if method in _METHODS_WITH_BODY and body is not None:
            kwargs["json"] = body
        try:
            response = self.session.request(method, self._full_url(url), **kwargs)
        except requests.RequestException as exc:
            raise RequestError(f"{method} request to {self.base_url}{url} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise RequestError(
                f"{method} request to {self.base_url}{url} failed with status code {response.status_code}",
                status_code=response.status_code,
            )

        if as_text:
            return response.text
        try:
            return response.json()
        except ValueError as exc:
            log.error("Failed to unmarshal response: %s, raw body: %s", exc, response.text)
            raise RequestError(
                f"failed to decode response from {self.base_url}{url}: {exc}",
                status_code=response.status_code,
            ) from exc

    def get(self, url: str, as_text: bool = False) -> Any:
        """GET ``url`` (e.g. "/v0/credentials/123/k8s")."""
        return self.request("GET", url, None, as_text)

    def post(self, url: str, body: Any = None, as_text: bool = False) -> Any:
        return self.request("POST", url, body, as_text)

    def put(self, url: str, body: Any = None, as_text: bool = False) -> Any:
        return self.request("PUT", url, body, as_text)

    def delete(self, url: str, body: Any = None, as_text: bool = False) -> Any:
        return self.request("DELETE", url, body, as_text)

    def download(self, url: str, file_path: str | Path) -> requests.Response:
        """Stream ``url`` into ``file_path`` and return the response.

        The file is created even when the request fails, and the body is written
        whatever the status code; callers check the returned response.
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as out:
            try:
                response = self.session.get(self._full_url(url), stream=True)
            except requests.RequestException as exc:
                raise RequestError(f"Failed to download file from {self.base_url}{url}: {exc}") from exc
            with response:
                for chunk in response.iter_content(chunk_size=65536):
                    out.write(chunk)
        return response