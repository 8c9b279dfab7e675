"""
simple_odata.odata.encoder - Structured query to OData query string
====================================================================

Turns a query mapping such as::

    {
        "filter": {"and": [{"status": {"eq": "open"}}, "Price gt 10"]},
        "select": ["ID", "Name"],
        "top": 5,
    }

into ``?$select=ID,Name&$filter=(status eq 'open') and (Price gt 10)&$top=5``.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Sequence, Union
import math
import uuid

from simple_odata.odata.params import BOOLEAN_FUNCTIONS, COMPARISON_OPERATORS


LOGICAL_OPERATORS = ("and", "or", "not")

# Characters that would break the query string if left inside a literal
_ILLEGAL_CHARS = (
    ("%", "%25"),
    ("+", "%2B"),
    ("/", "%2F"),
    ("?", "%3F"),
    ("#", "%23"),
    ("&", "%26"),
)


class QueryEncodingError(ValueError):
    """Raised when a query object cannot be rendered as OData."""


def escape_odata_literal(value: str) -> str:
    """
    Escape a string value for use in OData $filter expressions.

    Parameters
    ----------
    value : str
        The value to escape

    Returns
    -------
    str
        Escaped value safe for OData filters

    Examples
    --------
    >>> escape_odata_literal("O'Brien")
    "O''Brien"
    """
    return value.replace("'", "''")


def _escape_illegal_chars(value: str) -> str:
    for char, code in _ILLEGAL_CHARS:
        value = value.replace(char, code)
    return escape_odata_literal(value)


def _join_csv(items: Union[str, Sequence[str]]) -> str:
    """Join items as comma-separated values, stripping whitespace."""
    if isinstance(items, str):
        return items.strip()
    return ",".join([s.strip() for s in items if s and s.strip()])


def _render_number(value: Union[float, Decimal]) -> str:
    # no exponent: "1e+20" would reach the server as "1e 20"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        value = Decimal(repr(value))
    if value.is_nan():
        return "NaN"
    if value.is_infinite():
        return "-INF" if value.is_signed() else "INF"
    return format(value, "f")


def _render_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        return value.isoformat()
    return value.astimezone(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


def render_value(value: Any) -> str:
    """Render a Python value as an OData literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (float, Decimal)):
        return _render_number(value)
    if isinstance(value, str):
        return f"'{_escape_illegal_chars(value)}'"
    if isinstance(value, datetime):
        return _render_datetime(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    raise QueryEncodingError(f"Unexpected filter value type: {type(value).__name__}")


def _group(parts: List[str], op: str) -> str:
    if op == "not":
        return f"not ({' and '.join(parts)})"
    if len(parts) == 1:
        return parts[0]
    return f" {op} ".join(f"({p})" for p in parts)


def _render_operators(prop: str, ops: Mapping[str, Any]) -> List[str]:
    out: List[str] = []
    for op, value in ops.items():
        if op in COMPARISON_OPERATORS:
            out.append(f"{prop} {op} {render_value(value)}")
        elif op == "in":
            if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
                raise QueryEncodingError(f"'in' expects a list of values for {prop!r}")
            out.append(f"{prop} in ({','.join(render_value(v) for v in value)})")
        elif op in BOOLEAN_FUNCTIONS:
            out.append(f"{op}({prop},{render_value(value)})")
        elif isinstance(value, Mapping):
            # nested property: {"Address": {"City": {"eq": "Oslo"}}}
            out.extend(_render_operators(f"{prop}/{op}", value))
        else:
            out.append(f"{prop}/{op} eq {render_value(value)}")
    return out


def build_filter(filters: Any) -> str:
    """
    Render a filter structure as a ``$filter`` expression.

    Accepts a raw string, a list of entries (joined with ``and``), or a
    mapping whose keys are logical operators or property names.
    """
    if isinstance(filters, str):
        return filters
    if isinstance(filters, (list, tuple)):
        return _group([f for f in (build_filter(e) for e in filters) if f], "and")
    if not isinstance(filters, Mapping):
        raise QueryEncodingError(f"Unexpected filter entry: {filters!r}")

    parts: List[str] = []
    for key, value in filters.items():
        if not isinstance(key, str) or not key:
            raise QueryEncodingError(f"Filter keys must be non-empty strings, got {key!r}")
        if key in LOGICAL_OPERATORS:
            entries = value if isinstance(value, (list, tuple)) else [value]
            built = [f for f in (build_filter(e) for e in entries) if f]
            if built:
                parts.append(_group(built, key))
        elif isinstance(value, Mapping):
            parts.extend(_render_operators(key, value))
        else:
            parts.append(f"{key} eq {render_value(value)}")

    if len(parts) > 1:
        return " and ".join(f"({p})" for p in parts)
    return parts[0] if parts else ""


def build_query(query: Mapping[str, Any]) -> str:
    """
    Encode a structured query as an OData query string.

    Parameters
    ----------
    query : mapping
        Optional keys ``filter``, ``search``, ``select``, ``order_by``, ``top``

    Returns
    -------
    str
        ``""`` when nothing is set, else a string starting with ``?``

    Raises
    ------
    QueryEncodingError
        On filter structures that cannot be rendered
    """
    params: Dict[str, str] = {}
    if query.get("select"):
        params["$select"] = _join_csv(query["select"])
    if query.get("search"):
        params["$search"] = str(query["search"])
    if query.get("filter"):
        params["$filter"] = build_filter(query["filter"])
    if query.get("order_by"):
        params["$orderby"] = _join_csv(query["order_by"])
    if query.get("top"):
        params["$top"] = str(query["top"])

    parts = [f"{k}={v}" for k, v in params.items() if v != ""]
    return "?" + "&".join(parts) if parts else ""
