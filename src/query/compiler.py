"""
Filter set compiler: turns resolved filter bindings into a complete SWQL statement
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import (
    CompiledQuery,
    FilterBinding,
    Operator,
    QueryDefinition,
    SEVERITY_KEYWORDS,
    DEFAULT_MIN_SEVERITY,
    DEFAULT_MAX_SEVERITY,
)
from .predicates import build_clause

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Message types dropped from syslog output unless the caller asks for everything
EMPTY_MESSAGE_TYPE = ""
LINK_STATUS_MESSAGE_TYPES = (
    "LINK-3-UPDOWN",
    "LINK-5-CHANGED",
    "LINEPROTO-5-UPDOWN",
    "ETHPORT-5-IF_DOWN_LINK_FAILURE",
    "ETHPORT-5-IF_UP",
)
POE_STATUS_MESSAGE_TYPES = (
    "ILPOWER-5-POWER_GRANTED",
    "ILPOWER-5-DETECT",
    "ILPOWER-5-IEEE_DISCONNECT",
    "ILPOWER-7-DETECT",
)
HARDWARE_REPORT_MESSAGE_TYPES = (
    "ENVMON*",
    "PLATFORM_ENV*",
    "HARDWARE*",
    "FAN*",
    "PSU*",
)

def build_projection(definition: QueryDefinition, fields: Iterable[str] = (),
                     custom_properties: Iterable[str] = ()) -> List[str]:
    """Default fields, then caller fields, then one term per custom property"""
    projection = list(definition.default_fields)
    projection.extend(fields)
    custom_properties = list(custom_properties)
    if custom_properties:
        alias = definition.custom_property_alias or definition.alias
        projection.extend(f"{alias}.CustomProperties.{name}" for name in custom_properties)
    return projection

def resolve_severity(min_severity: int = DEFAULT_MIN_SEVERITY,
                     max_severity: int = DEFAULT_MAX_SEVERITY,
                     min_keyword: Optional[str] = None,
                     max_keyword: Optional[str] = None) -> Tuple[int, int]:
    """
    Resolve the (min, max) severity bounds.

    Keywords win over numbers for the same bound. The scale is inverted
    (0 = emerg), so the defaults min=7/max=0 cover every severity.
    """
    if min_keyword:
        min_severity = _severity_from_keyword(min_keyword)
    if max_keyword:
        max_severity = _severity_from_keyword(max_keyword)
    return min_severity, max_severity

def _severity_from_keyword(keyword: str) -> int:
    try:
        return SEVERITY_KEYWORDS[keyword.lower()]
    except KeyError:
        valid = ", ".join(SEVERITY_KEYWORDS)
        raise ValueError(f"Unknown severity keyword '{keyword}' (expected one of: {valid})")

def resolve_message_types(exclude: Sequence[str] = (),
                          include_all: bool = False,
                          exclude_empty: bool = True,
                          exclude_link_status: bool = True,
                          exclude_poe_status: bool = True,
                          include_hardware_reports: bool = False) -> Tuple[List[str], List[str]]:
    """
    Build the (exclusions, hardware inclusions) message type lists.

    Explicit exclusions come first, followed by each enabled conditional
    block. ``include_all`` switches off every conditional block and the
    hardware inclusions, whatever the individual toggles say.
    """
    exclusions = list(exclude)
    inclusions: List[str] = []

    if include_all:
        return exclusions, inclusions

    if exclude_empty:
        exclusions.append(EMPTY_MESSAGE_TYPE)
    if exclude_link_status:
        exclusions.extend(LINK_STATUS_MESSAGE_TYPES)
    if exclude_poe_status:
        exclusions.extend(POE_STATUS_MESSAGE_TYPES)
    if include_hardware_reports:
        inclusions.extend(HARDWARE_REPORT_MESSAGE_TYPES)

    return exclusions, inclusions

def resolve_time_window(hours: Optional[float] = None,
                        days: Optional[float] = None,
                        start: Optional[datetime] = None,
                        end: Optional[datetime] = None,
                        now: Optional[datetime] = None) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Resolve the (start, end) window.

    A relative window (hours, else days) replaces any absolute bounds and
    runs up to ``now``. Otherwise the absolute bounds are used as given; an
    end before start is passed through untouched.
    """
    if hours or days:
        now = now or datetime.now(timezone.utc)
        span = timedelta(hours=hours) if hours else timedelta(days=days)
        return now - span, None
    return start, end

def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)

def time_window_bindings(field: str, start: Optional[datetime],
                         end: Optional[datetime]) -> List[FilterBinding]:
    bindings = []
    if start is not None:
        bindings.append(FilterBinding(field, Operator.GE, (format_timestamp(start),)))
    if end is not None:
        bindings.append(FilterBinding(field, Operator.LE, (format_timestamp(end),)))
    return bindings

def compile_where(bindings: Iterable[FilterBinding]) -> str:
    """AND together the clauses of every binding that has values"""
    clauses = []
    for binding in bindings:
        clause = build_clause(binding.field, binding.values, binding.operator)
        if clause is not None:
            clauses.append(clause)
    return " AND ".join(clauses)

def compile_query(definition: QueryDefinition,
                  bindings: Iterable[FilterBinding],
                  limit: int = 0,
                  fields: Iterable[str] = (),
                  custom_properties: Iterable[str] = ()) -> CompiledQuery:
    """Assemble SELECT [TOP n] ... FROM ... [JOIN ...] [WHERE ...] ORDER BY ..."""
    projection = build_projection(definition, fields, custom_properties)

    parts = ["SELECT"]
    if limit and limit > 0:
        parts.append(f"TOP {limit}")
    parts.append(", ".join(projection))
    parts.append(f"FROM {definition.entity} AS {definition.alias}")

    if definition.join_entity:
        parts.append(f"JOIN {definition.join_entity} AS {definition.join_alias} ON {definition.join_on}")

    where = compile_where(bindings)
    if where:
        parts.append(f"WHERE {where}")

    order = f"ORDER BY {definition.order_by}"
    if definition.descending:
        order += " DESC"
    parts.append(order)

    text = " ".join(parts)
    logger.debug(f"Compiled query: {text}")
    return CompiledQuery(text)
