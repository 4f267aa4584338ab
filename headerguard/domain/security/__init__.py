"""
Security bounded context — domain layer.

This module contains all domain logic for the security context:
- Policy configuration model and validation
- CSP and HSTS header rendering
- Session-scoped nonce issuance
"""
