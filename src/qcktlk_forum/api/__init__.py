"""HTTP layer of the forum backend."""
