"""HTTP API: dependencies, routers and endpoints."""
