"""
simple_odata.core.connection - High-level connection management
================================================================

Provides an environment-driven ConnectionContext that owns one HTTP
session and hands out configured ODataClient instances.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from dotenv import load_dotenv

from simple_odata.core.session import HttpConfig, HttpSession

if TYPE_CHECKING:
    from simple_odata.odata.client import ODataClient


class ConnectionContext:
    """
    Connection manager for one OData API root.

    Unset arguments fall back to environment variables; a ``.env`` file
    (``env_file`` or ``./.env``) is loaded first without overriding
    variables that are already set.

    Parameters
    ----------
    api_root : str, optional
        Base URL. Falls back to ODATA_API_ROOT env var.
    token : str, optional
        Bearer token. Falls back to ODATA_BEARER_TOKEN env var.
    subscription_key : str, optional
        Gateway subscription key. Falls back to ODATA_SUBSCRIPTION_KEY.
    subscription_key_name : str, optional
        Query parameter name for the key. Falls back to
        ODATA_SUBSCRIPTION_KEY_NAME, then "subscription-key".
    api_version : str, optional
        Gateway API version. Falls back to ODATA_API_VERSION.
    api_version_name : str, optional
        Query parameter name for the version. Falls back to
        ODATA_API_VERSION_NAME, then "api-version".
    verify : bool, optional
        SSL verification. Falls back to ODATA_VERIFY_TLS env var.
    timeout : float, optional
        Request timeout in seconds. Falls back to ODATA_TIMEOUT, then 60.
    env_file : str or Path, optional
        Explicit .env file to load

    Examples
    --------
    >>> with ConnectionContext() as conn:  # reads ODATA_* env vars
    ...     client = conn.client()
    ...     resp = await client.endpoint("items").count(5).get()
    """

    def __init__(
        self,
        api_root: Optional[str] = None,
        token: Optional[str] = None,
        subscription_key: Optional[str] = None,
        subscription_key_name: Optional[str] = None,
        api_version: Optional[str] = None,
        api_version_name: Optional[str] = None,
        verify: Optional[bool] = None,
        timeout: Optional[float] = None,
        env_file: Optional[Union[str, Path]] = None,
    ) -> None:
        env_path = Path(env_file) if env_file else Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path, override=False)

        self._api_root = (api_root or os.environ.get("ODATA_API_ROOT", "")).rstrip("/")
        self._token = token or os.environ.get("ODATA_BEARER_TOKEN") or None
        self._subscription_key = subscription_key or os.environ.get("ODATA_SUBSCRIPTION_KEY") or None
        self._subscription_key_name = (
            subscription_key_name
            or os.environ.get("ODATA_SUBSCRIPTION_KEY_NAME")
            or "subscription-key"
        )
        self._api_version = api_version or os.environ.get("ODATA_API_VERSION") or None
        self._api_version_name = (
            api_version_name
            or os.environ.get("ODATA_API_VERSION_NAME")
            or "api-version"
        )

        if verify is not None:
            self._verify = verify
        else:
            self._verify = os.environ.get("ODATA_VERIFY_TLS", "true").lower() != "false"

        if timeout is not None:
            self._timeout = float(timeout)
        else:
            self._timeout = float(os.environ.get("ODATA_TIMEOUT", "60"))

        if not self._api_root:
            raise ValueError(
                "Missing api_root. Set ODATA_API_ROOT environment variable "
                "or pass api_root parameter."
            )

        if self._token and (self._subscription_key or self._api_version):
            raise ValueError(
                "Bearer token and subscription key/api version are exclusive. "
                "Configure one of them."
            )

        self._session: Optional[HttpSession] = None

    @property
    def session(self) -> HttpSession:
        """Get or create the underlying HTTP session."""
        if self._session is None:
            self._session = HttpSession(HttpConfig(timeout=self._timeout, verify=self._verify))
        return self._session

    def client(self) -> "ODataClient":
        """
        Create an ODataClient sharing this context's session.

        Each call returns a fresh client with empty builder state.
        """
        # Import here to avoid circular imports
        from simple_odata.odata.client import ODataClient

        if self._subscription_key or self._api_version:
            subscription = None
            if self._subscription_key:
                subscription = {
                    "keyName": self._subscription_key_name,
                    "subscriptionKey": self._subscription_key,
                }
            version = None
            if self._api_version:
                version = {
                    "apiVersionName": self._api_version_name,
                    "version": self._api_version,
                }
            return ODataClient.with_subscription(
                self._api_root,
                subscription_key=subscription,
                api_version=version,
                session=self.session,
            )
        return ODataClient(self._api_root, token=self._token, session=self.session)

    def close(self) -> None:
        """Close the connection."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "ConnectionContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def api_root(self) -> str:
        """The configured API root."""
        return self._api_root

    @property
    def verify(self) -> bool:
        return self._verify

    @property
    def timeout(self) -> float:
        return self._timeout
