"""
Infrastructure adapters for the security bounded context.

- PolicyStore: resolves and holds the active PolicyConfig.
- InMemorySessionStore: implements the SessionStore port.
"""
