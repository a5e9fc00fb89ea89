"""
SWQL filter compilation module
"""

from .models import Operator, FilterBinding, CompiledQuery, QueryDefinition, SEVERITY_KEYWORDS
from .predicates import translate_pattern, build_clause
from .compiler import compile_query, resolve_severity, resolve_message_types, resolve_time_window
from .filters import (
    SyslogFilter,
    EventFilter,
    NodeFilter,
    TimeWindow,
    compile_syslog_query,
    compile_event_query,
    compile_node_query,
)

__all__ = [
    'Operator', 'FilterBinding', 'CompiledQuery', 'QueryDefinition', 'SEVERITY_KEYWORDS',
    'translate_pattern', 'build_clause',
    'compile_query', 'resolve_severity', 'resolve_message_types', 'resolve_time_window',
    'SyslogFilter', 'EventFilter', 'NodeFilter', 'TimeWindow',
    'compile_syslog_query', 'compile_event_query', 'compile_node_query',
]
