"""
Security middleware package.

- SecurityHeadersMiddleware: CSP, auxiliary headers, HSTS.
- SessionCookieMiddleware: session id cookie.
- Rate limiting for the report endpoint.
"""
