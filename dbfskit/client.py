"""The REST API client."""

from __future__ import annotations

import logging
import ssl
from functools import partialmethod
from typing import Literal

import requests
from requests.adapters import HTTPAdapter

from dbfskit import session
from dbfskit.errors import TransportError, error_for
from dbfskit.session import SessionConfig

logger = logging.getLogger(__package__)


def make_ssl_context() -> ssl.SSLContext:
    ctx = ssl.create_default_context()
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    return ctx


class TLS12Adapter(HTTPAdapter):
    """An HTTP adapter that refuses anything older than TLS 1.2."""

    def init_poolmanager(self, *args, **kwargs):
        kwargs["ssl_context"] = make_ssl_context()
        return super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, proxy, **proxy_kwargs):
        proxy_kwargs["ssl_context"] = make_ssl_context()
        return super().proxy_manager_for(proxy, **proxy_kwargs)


def make_http_session() -> requests.Session:
    http = requests.Session()
    http.mount("https://", TLS12Adapter())
    return http


class Client:
    """A client bound to one workspace.

    Usage:

        from dbfskit import Client, SessionConfig

        client = Client(SessionConfig.create(token, "https://my-host"))
        client.get("/2.0/dbfs/get-status", params={"path": "/tmp"})
    """

    def __init__(
        self,
        config: SessionConfig,
        http: requests.Session | None = None,
    ):
        self.config = config
        self.http = http if http is not None else make_http_session()

    def __repr__(self) -> str:
        return f"Client({self.config!r})"

    def build_url(self, endpoint: str) -> str:
        return self.config.api_root_url + endpoint

    def build_headers(self, headers: dict | None = None) -> dict:
        base_headers = {
            "Authorization": f"Bearer {self.config.access_token}",
            "Content-Type": "application/json",
        }
        if headers is not None:
            return base_headers | headers
        return base_headers

    def _request(
        self,
        kind: Literal["get", "post"],
        endpoint: str,
        params: dict | None = None,
        json: dict | None = None,
        headers: dict | None = None,
        **kwargs,
    ) -> dict:
        url = self.build_url(endpoint)
        logger.debug(f"{kind.upper()} {url}")
        func = getattr(self.http, kind)
        try:
            resp = func(
                url,
                params=params,
                json=json,
                headers=self.build_headers(headers),
                **kwargs,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e
        if resp.status_code >= 400:
            raise _error_from_response(resp)
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON in response from {url}",
                status_code=resp.status_code,
                body=resp.text,
            ) from e

    get = partialmethod(_request, "get")
    post = partialmethod(_request, "post")


def _error_from_response(resp: requests.Response) -> Exception:
    try:
        resp_json = resp.json()
    except ValueError:
        resp_json = None
    if isinstance(resp_json, dict) and "error_code" in resp_json:
        return error_for(
            resp_json["error_code"],
            resp_json.get("message", ""),
            status_code=resp.status_code,
        )
    return TransportError(
        f"{resp.status_code}: {resp.reason}",
        status_code=resp.status_code,
        body=resp.text,
    )


_default_client: Client | None = None


def get_client() -> Client:
    """Get a client for the default session.

    Raises ``NotInitializedError`` if ``dbfskit.configure`` has not been
    called.
    """
    global _default_client
    config = session.ensure_configured()
    if _default_client is None or _default_client.config is not config:
        _default_client = Client(config)
    return _default_client


def resolve(client: Client | None) -> Client:
    if client is not None:
        return client
    return get_client()
