"""
simple_odata.odata.params - Typed client configuration values
==============================================================

Every model accepts both snake_case field names and the camelCase keys
used in plain-dict configuration, e.g. ``{"keyName": "x", "keyValue": "1"}``.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Literal, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field


M = TypeVar("M", bound=BaseModel)

COMPARISON_OPERATORS = ("eq", "ne", "gt", "ge", "lt", "le")
BOOLEAN_FUNCTIONS = ("startswith", "endswith", "contains")

FilterOperator = Literal[
    "eq", "ne", "gt", "ge", "lt", "le", "in",
    "startswith", "endswith", "contains",
]


class _Value(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class KeyValuePair(_Value):
    """A custom query parameter rendered as ``&key_name=key_value``."""

    key_name: str = Field(alias="keyName", description="Query parameter name")
    key_value: Any = Field(alias="keyValue", description="Query parameter value")


class ParameterReplacement(_Value):
    """Literal substitution applied to the final query string."""

    parameter_to_replace: str = Field(
        alias="parameterToReplace",
        description="Text to look for in the query string",
        json_schema_extra={"example": "$filter"},
    )
    replacement: str = Field(
        description="Text that replaces the first occurrence",
        json_schema_extra={"example": "filter"},
    )


class SubscriptionKey(_Value):
    """Gateway subscription key, sent as a query parameter."""

    key_name: str = Field(alias="keyName", json_schema_extra={"example": "subscription-key"})
    subscription_key: str = Field(alias="subscriptionKey")


class ApiVersion(_Value):
    """Gateway API version, sent as a query parameter."""

    api_version_name: str = Field(alias="apiVersionName", json_schema_extra={"example": "api-version"})
    version: str


class FilterSpec(_Value):
    """
    One ``property operator value`` predicate.

    Examples
    --------
    >>> FilterSpec.model_validate({"propertyName": "status", "propertyValue": "open"})
    FilterSpec(property_name='status', property_value='open', operator='eq')
    """

    property_name: str = Field(alias="propertyName")
    property_value: Any = Field(alias="propertyValue")
    operator: FilterOperator = "eq"

    def to_filter_object(self) -> dict:
        return {self.property_name: {self.operator: self.property_value}}


class GenericAuth(_Value):
    """Custom parameters on every request plus an optional bearer token."""

    kind: Literal["generic"] = "generic"
    custom_key_value_pairs: Tuple[KeyValuePair, ...] = ()
    token: Optional[str] = None

    def default_pairs(self) -> List[KeyValuePair]:
        return list(self.custom_key_value_pairs)


class SubscriptionAuth(_Value):
    """Managed-gateway convention: subscription key and API version parameters."""

    kind: Literal["subscription"] = "subscription"
    subscription_key: Optional[SubscriptionKey] = None
    api_version: Optional[ApiVersion] = None

    def default_pairs(self) -> List[KeyValuePair]:
        pairs: List[KeyValuePair] = []
        if self.subscription_key is not None:
            pairs.append(KeyValuePair(
                key_name=self.subscription_key.key_name,
                key_value=self.subscription_key.subscription_key,
            ))
        if self.api_version is not None:
            pairs.append(KeyValuePair(
                key_name=self.api_version.api_version_name,
                key_value=self.api_version.version,
            ))
        return pairs


ClientAuth = Union[GenericAuth, SubscriptionAuth]


def coerce(model: Type[M], value: Any) -> M:
    """Return ``value`` as an instance of ``model``, validating dicts."""
    if isinstance(value, model):
        return value
    return model.model_validate(value)


def coerce_all(model: Type[M], values: Optional[Iterable[Any]]) -> Tuple[M, ...]:
    return tuple(coerce(model, v) for v in (values or ()))


def render_pairs(pairs: Iterable[KeyValuePair]) -> str:
    """Render pairs as ``&name=value`` fragments, in order."""
    out = ""
    for pair in pairs:
        value = pair.key_value
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif value is None:
            value = "null"
        out += f"&{pair.key_name}={value}"
    return out
