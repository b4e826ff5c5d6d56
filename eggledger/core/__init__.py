"""Core domain: entities, interfaces, services."""
