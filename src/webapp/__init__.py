"""HTTP API of the resolver."""
