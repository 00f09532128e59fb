"""HTTP routers, one per entity kind."""
