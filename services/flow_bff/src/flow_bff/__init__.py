"""Backend-for-frontend for the workflow builder: tenant scoping, ownership checks and upstream proxying."""
