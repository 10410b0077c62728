"""Session configuration: where the API lives and how to authenticate."""

from __future__ import annotations

import logging

from pydantic import BaseModel

from dbfskit.errors import NotInitializedError
from dbfskit.models import CloudProvider

logger = logging.getLogger(__package__)

API_PATH = "/api"
AZURE_HOST_FRAGMENT = "azuredatabricks.net"

# The process-wide default, set by ``configure``
_config: SessionConfig | None = None


def detect_cloud_provider(url: str) -> CloudProvider:
    """Guess the cloud provider from a workspace URL."""
    if AZURE_HOST_FRAGMENT in url.lower():
        return "Azure"
    return "AWS"


def make_api_root_url(url: str) -> str:
    """Convert a workspace URL like ``https://host/`` to the API root,
    ``https://host/api``.
    """
    return url.strip().rstrip("/") + API_PATH


class SessionConfig(BaseModel):
    access_token: str
    api_root_url: str
    cloud_provider: CloudProvider

    @classmethod
    def create(
        cls,
        access_token: str,
        api_root_url: str,
        cloud_provider: CloudProvider | None = None,
    ) -> SessionConfig:
        """Create a config from a token and workspace URL.

        Parameters
        ----------
        access_token : str
            A personal access token, sent as a bearer token.
        api_root_url : str
            The workspace URL, e.g., ``https://abc-123.cloud.databricks.com``.
            Trailing slashes are removed and ``/api`` is appended.
        cloud_provider : str, optional
            ``"Azure"`` or ``"AWS"``. Detected from the URL if not provided.
        """
        if not access_token:
            raise ValueError("An access token is required")
        if not api_root_url or not api_root_url.strip():
            raise ValueError("An API root URL is required")
        if cloud_provider is None:
            cloud_provider = detect_cloud_provider(api_root_url)
        return cls(
            access_token=access_token,
            api_root_url=make_api_root_url(api_root_url),
            cloud_provider=cloud_provider,
        )

    @classmethod
    def from_settings(cls, settings) -> SessionConfig:
        """Create a config from saved user settings."""
        if not settings.host or not settings.token:
            raise NotInitializedError(
                "No host and token configured; "
                "run 'dbfskit configure' or set DBFSKIT_HOST and "
                "DBFSKIT_TOKEN"
            )
        return cls.create(
            access_token=str(settings.token),
            api_root_url=settings.host,
            cloud_provider=settings.cloud_provider,
        )

    def __repr__(self) -> str:
        return (
            f"SessionConfig(api_root_url={self.api_root_url!r}, "
            f"cloud_provider={self.cloud_provider!r})"
        )

    __str__ = __repr__


def configure(
    access_token: str,
    api_root_url: str,
    cloud_provider: CloudProvider | None = None,
) -> SessionConfig:
    """Set the default session used by module-level functions."""
    global _config
    _config = SessionConfig.create(
        access_token=access_token,
        api_root_url=api_root_url,
        cloud_provider=cloud_provider,
    )
    logger.debug(f"Configured session for {_config.api_root_url}")
    return _config


def ensure_configured() -> SessionConfig:
    if _config is None:
        raise NotInitializedError()
    return _config


def reset() -> None:
    global _config
    _config = None
