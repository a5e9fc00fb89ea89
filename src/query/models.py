"""
Query data structures and models
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

class Operator(Enum):
    """Base comparison operators a filter binding can use"""
    EQ = "="
    NEQ = "!="
    LE = "<="
    GE = ">="

    @property
    def negated(self) -> bool:
        return self is Operator.NEQ

@dataclass(frozen=True)
class FilterBinding:
    """One filter dimension: a field, its operator and the values to compare against"""
    field: str
    operator: Operator
    values: Tuple[str, ...] = ()

@dataclass(frozen=True)
class CompiledQuery:
    """A complete SWQL statement, ready to send"""
    text: str

    def __str__(self) -> str:
        return self.text

# Syslog severities, most severe first
SEVERITY_KEYWORDS = {
    'emerg': 0,
    'alert': 1,
    'crit': 2,
    'err': 3,
    'warning': 4,
    'notice': 5,
    'info': 6,
    'debug': 7,
}

# Inverted on purpose: 7 (debug) is the least severe bound, 0 (emerg) the most
DEFAULT_MIN_SEVERITY = 7
DEFAULT_MAX_SEVERITY = 0

@dataclass(frozen=True)
class QueryDefinition:
    """Static shape of a read query: entities, join, default projection and ordering"""
    entity: str
    alias: str
    default_fields: Tuple[str, ...]
    order_by: str
    descending: bool = False
    join_entity: Optional[str] = None
    join_alias: Optional[str] = None
    join_on: Optional[str] = None
    time_field: Optional[str] = None
    # alias whose CustomProperties navigation property is projected
    custom_property_alias: Optional[str] = None
