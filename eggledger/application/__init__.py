"""
Application layer - Use cases, DTOs, and service factories.

Use cases are the entry point for API handlers; the factories in
``services`` wire the configured storage into the core services.
"""
