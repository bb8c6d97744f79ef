"""Transport integrations."""
