"""Infrastructure layer: database, identifiers and repositories."""
