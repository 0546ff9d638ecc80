"""Repository query methods."""
