"""Repository adapter, method metadata and repository factory."""
