"""Application layer - services on top of the repositories."""
