"""
Identity Module
===============

Bounded Context for authentication against the managed identity provider.

Responsibilities:
- Sign in with email and password, sign out, password reset
- Friendly messages for provider errors
- Explicit AuthSession object with auth-state listeners
- Bearer-token authentication for every admin route
"""

__version__ = "1.0.0"
