"""
simple_odata.core - Core connectivity
=====================================

This module provides the transport and configuration classes:

- HttpConfig: Transport configuration (timeout, TLS verification)
- HttpSession: Low-level HTTP session with OData error extraction
- ODataResponse: Decoded response of a successful request
- ConnectionContext: Environment-driven connection manager

"""

from simple_odata.core.session import (
    HttpConfig,
    HttpSession,
    ODataResponse,
    ODataUpstreamError,
)

from simple_odata.core.connection import ConnectionContext

__all__ = [
    "HttpConfig",
    "HttpSession",
    "ODataResponse",
    "ODataUpstreamError",
    "ConnectionContext",
]
