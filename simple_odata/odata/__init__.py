"""
simple_odata.odata - OData query building
=========================================

- ODataClient: Fluent query builder and GET client
- GenericAuth / SubscriptionAuth: The two client configurations
- build_query: Structured query to OData query string
- Helper utilities for OData literals and filters

"""

from simple_odata.odata.client import ODataClient
from simple_odata.odata.encoder import (
    QueryEncodingError,
    build_filter,
    build_query,
    escape_odata_literal,
)
from simple_odata.odata.filters import normalize_filter, normalize_filters
from simple_odata.odata.params import (
    ApiVersion,
    FilterSpec,
    GenericAuth,
    KeyValuePair,
    ParameterReplacement,
    SubscriptionAuth,
    SubscriptionKey,
)

__all__ = [
    "ODataClient",
    "QueryEncodingError",
    "build_filter",
    "build_query",
    "escape_odata_literal",
    "normalize_filter",
    "normalize_filters",
    "ApiVersion",
    "FilterSpec",
    "GenericAuth",
    "KeyValuePair",
    "ParameterReplacement",
    "SubscriptionAuth",
    "SubscriptionKey",
]
