"""
HeaderGuard — policy-driven HTTP security headers for web applications.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters).

Bounded contexts:
    - security: CSP rendering, session nonces, auxiliary headers, HSTS,
      violation report intake.

Layers:
    - domain: Pure policy logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, orchestration.
    - infrastructure: Adapters (policy store, session store).
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (errors, middleware, logging).
"""
