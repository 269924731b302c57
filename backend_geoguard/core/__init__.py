"""
Core utilities: domain exceptions and cross-cutting concerns.

Shared by the location engine, config layer, and API server.
"""
