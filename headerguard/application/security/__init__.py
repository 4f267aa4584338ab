"""
Application layer for the security bounded context.

Use cases coordinate domain entities and ports to fulfill
security operations. No framework or infrastructure imports allowed.
"""
