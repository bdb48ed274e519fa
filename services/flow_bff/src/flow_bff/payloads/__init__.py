"""
Request parsing and upstream body construction.

Every ``parse_*`` returns the typed input or a 400 :class:`Failure`; nothing
here touches the network.
"""
from flow_bff.payloads.conditions import (
    ConditionCreate,
    ConditionUpdate,
    parse_condition_create,
    parse_condition_update,
)
from flow_bff.payloads.edges import EdgeCreate, EdgeUpdate, parse_edge_create, parse_edge_update
from flow_bff.payloads.fields import Clock, iso_timestamp, parse_json_object, system_clock
from flow_bff.payloads.links import (
    ConditionPropertyLink,
    NodePropertyLink,
    parse_condition_property,
    parse_node_property,
)
from flow_bff.payloads.nodes import NodeInput, parse_node
from flow_bff.payloads.notifications import (
    NotificationCreate,
    RecipientCreate,
    parse_notification,
    parse_recipient,
)
from flow_bff.payloads.properties import PropertyInput, parse_property

__all__ = [
    "Clock",
    "system_clock",
    "iso_timestamp",
    "parse_json_object",
    "NodeInput",
    "parse_node",
    "EdgeCreate",
    "EdgeUpdate",
    "parse_edge_create",
    "parse_edge_update",
    "ConditionCreate",
    "ConditionUpdate",
    "parse_condition_create",
    "parse_condition_update",
    "PropertyInput",
    "parse_property",
    "NodePropertyLink",
    "ConditionPropertyLink",
    "parse_node_property",
    "parse_condition_property",
    "NotificationCreate",
    "RecipientCreate",
    "parse_notification",
    "parse_recipient",
]
