"""
simple_odata.odata.client - Fluent OData query client
======================================================
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from simple_odata.core.session import RESPONSE_TYPES, HttpConfig, HttpSession, ODataResponse
from simple_odata.odata.encoder import build_query
from simple_odata.odata.filters import FilterEntry, normalize_filters
from simple_odata.odata.params import (
    ApiVersion,
    ClientAuth,
    GenericAuth,
    KeyValuePair,
    ParameterReplacement,
    SubscriptionAuth,
    SubscriptionKey,
    coerce,
    coerce_all,
    render_pairs,
)

logger = logging.getLogger("simple_odata.client")


def _fields(value: Union[str, Sequence[str], None]) -> Optional[List[str]]:
    if isinstance(value, str):
        value = [value]
    fields = list(value or [])
    return fields or None


def _subscription_auth(subscription_key: Any, api_version: Any) -> SubscriptionAuth:
    return SubscriptionAuth(
        subscription_key=coerce(SubscriptionKey, subscription_key) if subscription_key is not None else None,
        api_version=coerce(ApiVersion, api_version) if api_version is not None else None,
    )


class ODataClient:
    """
    Fluent builder for OData list queries against one API root.

    Setters mutate the client and return it, so calls chain. Builder state
    is kept between requests: a second query on the same client inherits
    whatever the first one set unless it is overwritten or ``reset()`` is
    called. Calling ``filters`` again with the same logical operator
    replaces that operator's predicates.

    Two configurations are supported, chosen by the arguments given:

    - custom parameters: ``custom_key_value_pairs`` and an optional bearer
      ``token``; ``get`` also accepts per-request ``temp_key_value_pairs``
    - gateway convention: ``subscription_key`` and ``api_version``, both
      sent as query parameters

    Parameters
    ----------
    api_root : str
        Base URL, e.g. "https://api.example.com/odata"
    custom_key_value_pairs : iterable, optional
        Parameters added to every request
    replace_parameter_key_with : iterable, optional
        Literal substitutions applied to every final query string
    token : str, optional
        Sent as ``Authorization: Bearer <token>``
    subscription_key : SubscriptionKey or dict, optional
    api_version : ApiVersion or dict, optional
    auth : GenericAuth or SubscriptionAuth, optional
        Explicit configuration, instead of the arguments above
    session : HttpSession, optional
        Transport to use; built from ``config`` when omitted
    config : HttpConfig, optional

    Examples
    --------
    >>> client = ODataClient("https://api.example.com", token="eyJ...")
    >>> resp = await (
    ...     client.endpoint("items")
    ...     .filters([{"propertyName": "status", "propertyValue": "open"}])
    ...     .count(5)
    ...     .get()
    ... )
    """

    def __init__(
        self,
        api_root: str,
        custom_key_value_pairs: Optional[Iterable[Any]] = None,
        replace_parameter_key_with: Optional[Iterable[Any]] = None,
        token: Optional[str] = None,
        *,
        subscription_key: Optional[Any] = None,
        api_version: Optional[Any] = None,
        auth: Optional[ClientAuth] = None,
        session: Optional[HttpSession] = None,
        config: Optional[HttpConfig] = None,
    ) -> None:
        if not isinstance(api_root, str) or not api_root:
            raise ValueError("api_root must be a non-empty URL string")

        if auth is not None:
            if custom_key_value_pairs or token or subscription_key is not None or api_version is not None:
                raise ValueError(
                    "auth cannot be combined with custom_key_value_pairs, token, "
                    "subscription_key or api_version"
                )
        else:
            auth = self._resolve_auth(custom_key_value_pairs, token, subscription_key, api_version)

        self._api_root = api_root
        self._auth = auth
        self._replacements = coerce_all(ParameterReplacement, replace_parameter_key_with)
        self._owns_session = session is None
        self._session = session or HttpSession(config)

        self._endpoint = ""
        self._filters: Dict[str, List[FilterEntry]] = {}
        self._search: Optional[str] = None
        self._select: Optional[List[str]] = None
        self._order_by: Optional[List[str]] = None
        self._count: Optional[int] = None

    @classmethod
    def with_subscription(
        cls,
        api_root: str,
        subscription_key: Optional[Any] = None,
        api_version: Optional[Any] = None,
        replace_parameter_with: Optional[Iterable[Any]] = None,
        **kwargs: Any,
    ) -> "ODataClient":
        """Build a client for gateways expecting subscription key and API version parameters."""
        auth = _subscription_auth(subscription_key, api_version)
        return cls(api_root, replace_parameter_key_with=replace_parameter_with, auth=auth, **kwargs)

    @staticmethod
    def _resolve_auth(custom_key_value_pairs, token, subscription_key, api_version) -> ClientAuth:
        if subscription_key is None and api_version is None:
            return GenericAuth(
                custom_key_value_pairs=coerce_all(KeyValuePair, custom_key_value_pairs),
                token=token,
            )
        if custom_key_value_pairs or token:
            raise ValueError(
                "custom_key_value_pairs/token cannot be combined with "
                "subscription_key/api_version"
            )
        return _subscription_auth(subscription_key, api_version)

    # ---------------- lifecycle ----------------

    def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "ODataClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------- properties ----------------

    @property
    def api_root(self) -> str:
        return self._api_root

    @property
    def auth(self) -> ClientAuth:
        return self._auth

    @property
    def session(self) -> HttpSession:
        return self._session

    @property
    def filter_groups(self) -> Dict[str, List[FilterEntry]]:
        """Current filters by logical operator (a copy)."""
        return {op: list(entries) for op, entries in self._filters.items()}

    # ---------------- fluent setters ----------------

    def endpoint(self, name: str) -> "ODataClient":
        """Set the sub-path appended to the API root."""
        self._endpoint = f"/{name}"
        return self

    def search(self, value: Optional[str] = None) -> "ODataClient":
        self._search = value
        return self

    def order_by(self, fields: Union[str, Sequence[str], None] = None) -> "ODataClient":
        """Set ``$orderby`` fields, e.g. ``["Name desc", "ID"]``; empty clears it."""
        self._order_by = _fields(fields)
        return self

    def count(self, value: int = 10) -> "ODataClient":
        """
        Set ``$top``.

        A falsy value such as 0 is kept but leaves ``$top`` out of the query.
        """
        self._count = value
        return self

    def select(self, fields: Union[str, Sequence[str], None] = None) -> "ODataClient":
        self._select = _fields(fields)
        return self

    def filters(self, filters_array: Iterable[Any], logical_operator: str = "and") -> "ODataClient":
        """
        Set the predicates combined by ``logical_operator``.

        Entries are raw OData fragments (str) or predicates
        ``{"propertyName": ..., "propertyValue": ..., "operator": ...}``
        with operator one of eq, ne, gt, ge, lt, le, in (default eq).
        Replaces any earlier list for the same logical operator.
        """
        if isinstance(filters_array, str):
            filters_array = [filters_array]
        self._filters[logical_operator] = normalize_filters(filters_array)
        return self

    def reset(self) -> "ODataClient":
        """Clear the endpoint and every query option."""
        self._endpoint = ""
        self._filters = {}
        self._search = None
        self._select = None
        self._order_by = None
        self._count = None
        return self

    # ---------------- request building ----------------

    def build_query_string(self, temp_key_value_pairs: Optional[Iterable[Any]] = None) -> str:
        """
        Build the query string for the current state.

        Order: encoded OData options, default parameters, per-request
        parameters, then the literal substitutions in declared order.
        """
        query: Dict[str, Any] = {}
        if self._filters:
            query["filter"] = self._filters
        if self._search:
            query["search"] = self._search
        if self._select:
            query["select"] = self._select
        if self._order_by:
            query["order_by"] = self._order_by
        if self._count:
            query["top"] = self._count

        built = (
            build_query(query)
            + render_pairs(self._auth.default_pairs())
            + render_pairs(coerce_all(KeyValuePair, temp_key_value_pairs))
        )
        if built.startswith("&"):
            built = "?" + built[1:]

        for rule in self._replacements:
            built = built.replace(rule.parameter_to_replace, rule.replacement, 1)
        return built

    def build_path(self, query_string: str = "") -> str:
        return f"{self._api_root}{self._endpoint}{query_string}"

    def build_headers(self, additional_headers: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if isinstance(self._auth, GenericAuth) and self._auth.token:
            headers["Authorization"] = f"Bearer {self._auth.token}"
        if additional_headers:
            headers.update(additional_headers)
        return headers

    # ---------------- actions ----------------

    def get(
        self,
        response_type: str = "json",
        additional_headers: Optional[Mapping[str, str]] = None,
        temp_key_value_pairs: Optional[Iterable[Any]] = None,
    ) -> Awaitable[ODataResponse]:
        """
        Issue a GET for the current state.

        The URL and headers are built immediately, so encoding and argument
        errors raise here. The returned awaitable resolves with the
        transport's ``ODataResponse`` or raises its error unchanged.

        Parameters
        ----------
        response_type : str
            "json" (default), "text", "arraybuffer", "blob" or "stream"
        additional_headers : dict, optional
            Overrides any header of the same name, Authorization included
        temp_key_value_pairs : iterable, optional
            Parameters for this request only (custom-parameter clients)

        Returns
        -------
        Awaitable[ODataResponse]
        """
        if response_type not in RESPONSE_TYPES:
            raise ValueError(f"Unsupported response_type: {response_type!r}")
        if temp_key_value_pairs and not isinstance(self._auth, GenericAuth):
            raise ValueError("temp_key_value_pairs are not supported with subscription auth")

        url = self.build_path(self.build_query_string(temp_key_value_pairs))
        headers = self.build_headers(additional_headers)
        logger.debug("GET %s", url)
        return self._dispatch("GET", url, headers, response_type)

    async def _dispatch(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        response_type: str,
    ) -> ODataResponse:
        return await asyncio.to_thread(
            self._session.request,
            method,
            url,
            headers=headers,
            response_type=response_type,
        )
