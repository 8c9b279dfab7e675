"""
simple_odata.odata.filters - Filter entry normalization
========================================================
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Union

from simple_odata.odata.params import FilterSpec, coerce


FilterEntry = Union[str, Dict[str, Any]]


def normalize_filter(entry: Any) -> FilterEntry:
    """
    Resolve one filter entry into the structure the encoder consumes.

    Raw strings are OData filter fragments and pass through untouched.
    Everything else is read as a predicate, with ``eq`` as the default
    operator.

    Parameters
    ----------
    entry : str, dict or FilterSpec
        ``"Price gt 10"``, ``{"propertyName": "a", "propertyValue": 1}``,
        ``{"propertyName": "a", "propertyValue": 1, "operator": "gt"}``

    Returns
    -------
    str or dict
        The raw fragment, or ``{property_name: {operator: property_value}}``

    Raises
    ------
    pydantic.ValidationError
        When a predicate lacks its name or value, or names an unknown operator

    Examples
    --------
    >>> normalize_filter({"propertyName": "a", "propertyValue": 1})
    {'a': {'eq': 1}}
    >>> normalize_filter("a eq 1")
    'a eq 1'
    """
    if isinstance(entry, str):
        return entry
    return coerce(FilterSpec, entry).to_filter_object()


def normalize_filters(entries: Iterable[Any]) -> List[FilterEntry]:
    return [normalize_filter(e) for e in entries]
