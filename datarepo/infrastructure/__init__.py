"""Infrastructure modules: database engine and session management."""
