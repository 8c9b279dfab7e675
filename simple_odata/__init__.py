"""
Simple OData Client (simple_odata)
==================================

A fluent client that builds OData query strings ($filter, $search,
$select, $orderby, $top) and issues GET requests against a REST endpoint.

Usage
-----
>>> import asyncio
>>> from simple_odata import ODataClient
>>>
>>> client = ODataClient("https://api.example.com", token="eyJ...")
>>> resp = asyncio.run(
...     client.endpoint("items")
...     .filters([{"propertyName": "status", "propertyValue": "open"}])
...     .count(5)
...     .get()
... )
>>> # GET https://api.example.com/items?$filter=status eq 'open'&$top=5

Subpackages
-----------
- simple_odata.core: HTTP session, errors and environment configuration
- simple_odata.odata: Query builder client, filters and query encoder

"""

__version__ = "0.1.0"

# Core exports - available at package root
from simple_odata.core.session import (
    HttpConfig,
    HttpSession,
    ODataResponse,
    ODataUpstreamError,
)

from simple_odata.core.connection import ConnectionContext

# Convenience re-exports
from simple_odata.odata import (
    ApiVersion,
    FilterSpec,
    GenericAuth,
    KeyValuePair,
    ODataClient,
    ParameterReplacement,
    QueryEncodingError,
    SubscriptionAuth,
    SubscriptionKey,
    build_query,
    escape_odata_literal,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "HttpConfig",
    "HttpSession",
    "ODataResponse",
    "ODataUpstreamError",
    "ConnectionContext",
    # OData
    "ODataClient",
    "GenericAuth",
    "SubscriptionAuth",
    "KeyValuePair",
    "ParameterReplacement",
    "SubscriptionKey",
    "ApiVersion",
    "FilterSpec",
    "QueryEncodingError",
    "build_query",
    "escape_odata_literal",
]
