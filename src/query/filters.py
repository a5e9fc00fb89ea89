"""
Filter parameter sets for the read queries (syslog, events, nodes)

Each query kind owns a fixed table of (field, operator, accessor) triples.
Compiling walks the table once and hands the resulting bindings to the
compiler; nothing is looked up by parameter name at runtime.
"""

from dataclasses import dataclass, field
from datetime import datetime
from operator import attrgetter
from typing import Callable, List, Optional, Sequence, Tuple

from .models import (
    CompiledQuery,
    FilterBinding,
    Operator,
    QueryDefinition,
    DEFAULT_MIN_SEVERITY,
    DEFAULT_MAX_SEVERITY,
)
from .compiler import (
    compile_query,
    resolve_message_types,
    resolve_severity,
    resolve_time_window,
    time_window_bindings,
)

BindingSpec = Tuple[str, Operator, Callable[[object], Sequence[str]]]

# ================== QUERY SHAPES ==================

SYSLOG_QUERY = QueryDefinition(
    entity="Orion.SysLog",
    alias="SysLog",
    default_fields=(
        "SysLog.DateTime",
        "SysLog.IPAddress",
        "SysLog.Hostname",
        "Nodes.Caption AS NodeName",
        "SysLog.MessageType",
        "SysLog.Message",
        "SysLog.SysLogSeverity",
        "SysLog.SysLogFacility",
    ),
    order_by="SysLog.DateTime",
    descending=True,
    join_entity="Orion.Nodes",
    join_alias="Nodes",
    join_on="SysLog.NodeID = Nodes.NodeID",
    time_field="SysLog.DateTime",
    custom_property_alias="Nodes",
)

EVENT_QUERY = QueryDefinition(
    entity="Orion.Events",
    alias="Events",
    default_fields=(
        "Events.EventTime",
        "Events.EventType",
        "Events.Message",
        "Nodes.Caption AS NodeName",
        "Nodes.IPAddress",
    ),
    order_by="Events.EventTime",
    descending=True,
    join_entity="Orion.Nodes",
    join_alias="Nodes",
    join_on="Events.NetworkNode = Nodes.NodeID",
    time_field="Events.EventTime",
    custom_property_alias="Nodes",
)

NODE_QUERY = QueryDefinition(
    entity="Orion.Nodes",
    alias="Nodes",
    default_fields=(
        "Nodes.NodeID",
        "Nodes.Caption AS NodeName",
        "Nodes.IPAddress",
        "Nodes.DNS",
        "Nodes.Vendor",
        "Nodes.MachineType",
        "Nodes.Status",
        "Nodes.StatusDescription",
        "Nodes.Uri",
    ),
    order_by="Nodes.Caption",
)

# ================== FILTER PARAMETER SETS ==================

@dataclass
class TimeWindow:
    """Relative (hours/days) or absolute (start/end) window"""
    hours: Optional[float] = None
    days: Optional[float] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None

@dataclass
class SyslogFilter:
    """Parameters for a syslog query"""
    include_node_name: List[str] = field(default_factory=list)
    exclude_node_name: List[str] = field(default_factory=list)
    include_ip_address: List[str] = field(default_factory=list)
    exclude_ip_address: List[str] = field(default_factory=list)
    include_vendor: List[str] = field(default_factory=list)
    exclude_vendor: List[str] = field(default_factory=list)
    include_machine_type: List[str] = field(default_factory=list)
    exclude_machine_type: List[str] = field(default_factory=list)
    include_message_type: List[str] = field(default_factory=list)
    exclude_message_type: List[str] = field(default_factory=list)
    include_message: List[str] = field(default_factory=list)
    exclude_message: List[str] = field(default_factory=list)
    min_severity: int = DEFAULT_MIN_SEVERITY
    max_severity: int = DEFAULT_MAX_SEVERITY
    min_severity_keyword: Optional[str] = None
    max_severity_keyword: Optional[str] = None
    window: TimeWindow = field(default_factory=TimeWindow)
    limit: int = 0
    fields: List[str] = field(default_factory=list)
    custom_properties: List[str] = field(default_factory=list)
    # message type toggles
    include_all_message_types: bool = False
    exclude_empty_message_types: bool = True
    exclude_link_status: bool = True
    exclude_poe_status: bool = True
    include_hardware_reports: bool = False

    def message_types(self) -> Tuple[List[str], List[str]]:
        """(inclusions, exclusions) after merging the toggled defaults"""
        exclusions, hardware = resolve_message_types(
            self.exclude_message_type,
            include_all=self.include_all_message_types,
            exclude_empty=self.exclude_empty_message_types,
            exclude_link_status=self.exclude_link_status,
            exclude_poe_status=self.exclude_poe_status,
            include_hardware_reports=self.include_hardware_reports,
        )
        return list(self.include_message_type) + hardware, exclusions

    def severity_bounds(self) -> Tuple[int, int]:
        return resolve_severity(self.min_severity, self.max_severity,
                                self.min_severity_keyword, self.max_severity_keyword)

@dataclass
class EventFilter:
    """Parameters for an event log query"""
    include_node_name: List[str] = field(default_factory=list)
    exclude_node_name: List[str] = field(default_factory=list)
    include_ip_address: List[str] = field(default_factory=list)
    exclude_ip_address: List[str] = field(default_factory=list)
    include_vendor: List[str] = field(default_factory=list)
    exclude_vendor: List[str] = field(default_factory=list)
    include_event_type: List[str] = field(default_factory=list)
    exclude_event_type: List[str] = field(default_factory=list)
    include_message: List[str] = field(default_factory=list)
    exclude_message: List[str] = field(default_factory=list)
    window: TimeWindow = field(default_factory=TimeWindow)
    limit: int = 0
    fields: List[str] = field(default_factory=list)
    custom_properties: List[str] = field(default_factory=list)

@dataclass
class NodeFilter:
    """Parameters for a node inventory query"""
    include_node_name: List[str] = field(default_factory=list)
    exclude_node_name: List[str] = field(default_factory=list)
    include_ip_address: List[str] = field(default_factory=list)
    exclude_ip_address: List[str] = field(default_factory=list)
    include_vendor: List[str] = field(default_factory=list)
    exclude_vendor: List[str] = field(default_factory=list)
    include_machine_type: List[str] = field(default_factory=list)
    exclude_machine_type: List[str] = field(default_factory=list)
    include_status: List[str] = field(default_factory=list)
    exclude_status: List[str] = field(default_factory=list)
    limit: int = 0
    fields: List[str] = field(default_factory=list)
    custom_properties: List[str] = field(default_factory=list)

# ================== BINDING TABLES ==================

SYSLOG_BINDINGS: Tuple[BindingSpec, ...] = (
    ("Nodes.Caption", Operator.EQ, attrgetter("include_node_name")),
    ("Nodes.Caption", Operator.NEQ, attrgetter("exclude_node_name")),
    ("SysLog.IPAddress", Operator.EQ, attrgetter("include_ip_address")),
    ("SysLog.IPAddress", Operator.NEQ, attrgetter("exclude_ip_address")),
    ("Nodes.Vendor", Operator.EQ, attrgetter("include_vendor")),
    ("Nodes.Vendor", Operator.NEQ, attrgetter("exclude_vendor")),
    ("Nodes.MachineType", Operator.EQ, attrgetter("include_machine_type")),
    ("Nodes.MachineType", Operator.NEQ, attrgetter("exclude_machine_type")),
    ("SysLog.MessageType", Operator.EQ, lambda f: f.message_types()[0]),
    ("SysLog.MessageType", Operator.NEQ, lambda f: f.message_types()[1]),
    ("SysLog.Message", Operator.EQ, attrgetter("include_message")),
    ("SysLog.Message", Operator.NEQ, attrgetter("exclude_message")),
    ("SysLog.SysLogSeverity", Operator.LE, lambda f: [str(f.severity_bounds()[0])]),
    ("SysLog.SysLogSeverity", Operator.GE, lambda f: [str(f.severity_bounds()[1])]),
)

EVENT_BINDINGS: Tuple[BindingSpec, ...] = (
    ("Nodes.Caption", Operator.EQ, attrgetter("include_node_name")),
    ("Nodes.Caption", Operator.NEQ, attrgetter("exclude_node_name")),
    ("Nodes.IPAddress", Operator.EQ, attrgetter("include_ip_address")),
    ("Nodes.IPAddress", Operator.NEQ, attrgetter("exclude_ip_address")),
    ("Nodes.Vendor", Operator.EQ, attrgetter("include_vendor")),
    ("Nodes.Vendor", Operator.NEQ, attrgetter("exclude_vendor")),
    ("Events.EventType", Operator.EQ, attrgetter("include_event_type")),
    ("Events.EventType", Operator.NEQ, attrgetter("exclude_event_type")),
    ("Events.Message", Operator.EQ, attrgetter("include_message")),
    ("Events.Message", Operator.NEQ, attrgetter("exclude_message")),
)

NODE_BINDINGS: Tuple[BindingSpec, ...] = (
    ("Nodes.Caption", Operator.EQ, attrgetter("include_node_name")),
    ("Nodes.Caption", Operator.NEQ, attrgetter("exclude_node_name")),
    ("Nodes.IPAddress", Operator.EQ, attrgetter("include_ip_address")),
    ("Nodes.IPAddress", Operator.NEQ, attrgetter("exclude_ip_address")),
    ("Nodes.Vendor", Operator.EQ, attrgetter("include_vendor")),
    ("Nodes.Vendor", Operator.NEQ, attrgetter("exclude_vendor")),
    ("Nodes.MachineType", Operator.EQ, attrgetter("include_machine_type")),
    ("Nodes.MachineType", Operator.NEQ, attrgetter("exclude_machine_type")),
    ("Nodes.Status", Operator.EQ, attrgetter("include_status")),
    ("Nodes.Status", Operator.NEQ, attrgetter("exclude_status")),
)

def build_bindings(table: Sequence[BindingSpec], params) -> List[FilterBinding]:
    return [
        FilterBinding(name, operator, tuple(str(v) for v in (accessor(params) or ())))
        for name, operator, accessor in table
    ]

# ================== COMPILE ENTRY POINTS ==================

def compile_syslog_query(params: SyslogFilter, now: Optional[datetime] = None) -> CompiledQuery:
    bindings = build_bindings(SYSLOG_BINDINGS, params)
    bindings.extend(_window_bindings(SYSLOG_QUERY, params.window, now))
    return compile_query(SYSLOG_QUERY, bindings, params.limit, params.fields, params.custom_properties)

def compile_event_query(params: EventFilter, now: Optional[datetime] = None) -> CompiledQuery:
    bindings = build_bindings(EVENT_BINDINGS, params)
    bindings.extend(_window_bindings(EVENT_QUERY, params.window, now))
    return compile_query(EVENT_QUERY, bindings, params.limit, params.fields, params.custom_properties)

def compile_node_query(params: NodeFilter) -> CompiledQuery:
    bindings = build_bindings(NODE_BINDINGS, params)
    return compile_query(NODE_QUERY, bindings, params.limit, params.fields, params.custom_properties)

def _window_bindings(definition: QueryDefinition, window: TimeWindow,
                     now: Optional[datetime]) -> List[FilterBinding]:
    start, end = resolve_time_window(window.hours, window.days, window.start, window.end, now)
    return time_window_bindings(definition.time_field, start, end)
