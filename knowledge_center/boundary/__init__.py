"""
Boundary layer for external system integrations.

Handles all interactions with external systems (database, object storage,
embedding provider). Provides adapters and clients for infrastructure dependencies.
"""
