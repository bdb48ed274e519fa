import os

# Listening port for `python -m flow_bff`
FLOW_BFF_PORT = int(os.getenv("FLOW_BFF_PORT", "8080"))

# Mount point of the workflow routes
DEFAULT_API_PREFIX = "/api"

# Upper bound on concurrent upstream reads issued by aggregate endpoints
DEFAULT_GRAPH_FANOUT_WORKERS = 4

# Local user storage (email -> tenant key)
DEFAULT_USERS_DATABASE_URL = "sqlite+aiosqlite:///./users.db"

# Prometheus metric prefix for the BFF service
METRIC_PREFIX = "flow_bff"
