from flow_bff.routes import (
    condition_properties,
    conditions,
    edges,
    graph,
    node_properties,
    nodes,
    notification_recipients,
    notifications,
    properties,
)

ROUTERS = (
    nodes.router,
    edges.router,
    conditions.router,
    properties.router,
    node_properties.router,
    condition_properties.router,
    notifications.router,
    notification_recipients.router,
    graph.router,
)

__all__ = ["ROUTERS"]
