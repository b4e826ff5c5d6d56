"""Infrastructure layer implementations."""
