"""
Identity Infrastructure Layer
=============================

- External: REST client for the managed identity toolkit
"""

from seva.identity.infrastructure.external import IdentityToolkitClient, translate_provider_error

__all__ = ["IdentityToolkitClient", "translate_provider_error"]
