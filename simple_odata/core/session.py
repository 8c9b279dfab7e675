"""
simple_odata.core.session - HTTP Transport
==========================================

Thin wrapper around a requests session used by the OData client:
- Timeout and TLS verification from configuration
- Response decoding by expected response type
- Proper error extraction from OData error payloads
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union
import logging
import time

import requests
from requests import Response, Session


RESPONSE_TYPES = frozenset({"json", "text", "arraybuffer", "blob", "stream"})


class ODataUpstreamError(RuntimeError):
    """
    Exception raised when the OData endpoint answers with an error status.

    Attributes
    ----------
    status : int
        HTTP status code
    body : str
        Response body (truncated for display)
    url : str
        The URL that was called
    headers : dict
        Response headers
    """

    def __init__(
        self,
        status: int,
        body: str,
        url: str,
        headers: Optional[Dict[str, str]] = None
    ):
        snippet = (body or "")[:1200]
        super().__init__(f"OData upstream error {status} for {url}: {snippet}")
        self.status = status
        self.body = body or ""
        self.url = url
        self.headers = headers or {}


@dataclass
class HttpConfig:
    """
    Transport configuration.

    Parameters
    ----------
    timeout : float, optional
        Request timeout in seconds (default: 60.0). None waits forever.
    verify : bool or str
        SSL verification (True, False, or path to CA bundle)
    user_agent : str
        User-Agent header value

    Examples
    --------
    >>> cfg = HttpConfig(timeout=10.0, verify=False)
    """
    timeout: Optional[float] = 60.0
    verify: Union[bool, str] = True
    user_agent: str = "simple-odata/0.1"


@dataclass
class ODataResponse:
    """
    Outcome of a successful request.

    Attributes
    ----------
    status : int
        HTTP status code
    headers : dict
        Response headers
    url : str
        Final URL of the request
    data : Any
        Body decoded according to the requested response type
    """
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    url: str = ""
    data: Any = None


class HttpSession:
    """
    Low-level HTTP session for OData endpoints.

    No retry adapter is mounted: every failure surfaces to the caller.
    Use as a context manager for automatic cleanup.

    Parameters
    ----------
    cfg : HttpConfig, optional
        Transport configuration

    Examples
    --------
    >>> with HttpSession(HttpConfig()) as sess:
    ...     resp = sess.request("GET", "https://api.example.com/items?$top=5")
    ...     resp.data
    """

    def __init__(self, cfg: Optional[HttpConfig] = None) -> None:
        self.cfg = cfg or HttpConfig()
        self.timeout = self.cfg.timeout
        self.verify = self.cfg.verify
        self.logger = logging.getLogger("simple_odata.http")

        self.session = self._build_session()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> "HttpSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _build_session(self) -> Session:
        sess = requests.Session()
        sess.headers.update({
            "Accept": "application/json, text/plain, */*",
            "User-Agent": self.cfg.user_agent,
        })
        return sess

    # ---------------- helpers ----------------

    def _decode(self, r: Response, response_type: str) -> Any:
        if response_type == "json":
            if not r.content:
                return None
            try:
                return r.json()
            except ValueError:
                return r.text
        if response_type == "text":
            return r.text
        if response_type == "stream":
            return r.raw
        return r.content

    def _extract_odata_error(self, r: Response) -> str:
        try:
            data = r.json()
        except ValueError:
            return r.text
        if not isinstance(data, dict):
            return r.text
        err = data.get("error")
        if not isinstance(err, dict):
            return r.text

        code = err.get("code")
        message = None
        if isinstance(err.get("message"), dict):
            message = err["message"].get("value")
        elif isinstance(err.get("message"), str):
            message = err.get("message")

        parts = []
        if code:
            parts.append(f"code={code}")
        if message:
            parts.append(f"message={message}")
        return " | ".join(parts) or r.text

    def _raise_for_error(self, r: Response, url: str) -> None:
        if r.status_code >= 400:
            body = self._extract_odata_error(r)
            raise ODataUpstreamError(r.status_code, body, url, dict(r.headers))

    # ---------------- public ops ----------------

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        data: Optional[Union[str, bytes]] = None,
        response_type: str = "json",
    ) -> ODataResponse:
        """
        Execute a request and decode the body.

        Parameters
        ----------
        method : str
            HTTP method, e.g. "GET"
        url : str
            Fully composed URL including the query string
        headers : dict, optional
            Request headers, merged over the session defaults
        data : str or bytes, optional
            Request body
        response_type : str
            One of "json", "text", "arraybuffer", "blob", "stream"

        Returns
        -------
        ODataResponse
            Status, headers, final URL and decoded body
        """
        if response_type not in RESPONSE_TYPES:
            raise ValueError(f"Unsupported response_type: {response_type!r}")

        t0 = time.perf_counter()
        r = self.session.request(
            method=method,
            url=url,
            headers=headers,
            data=data,
            timeout=self.timeout,
            verify=self.verify,
            stream=response_type == "stream",
        )
        self._raise_for_error(r, url)
        dt = (time.perf_counter() - t0) * 1000.0
        self.logger.debug("%s %s %sms", method.upper(), url, round(dt, 1))
        return ODataResponse(
            status=r.status_code,
            headers=dict(r.headers),
            url=r.url,
            data=self._decode(r, response_type),
        )
