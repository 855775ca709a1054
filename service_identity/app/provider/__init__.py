"""
Identity provider package.

Wraps the provider's management API (``/api/v1``) and its OAuth2
authorization server (``/oauth2/v1``). Failures are decoded once, at the
client boundary, into :class:`ProviderError` variants so that handlers never
inspect raw provider bodies.
"""

from .client import ProviderClient
from .errors import (
    ProviderError,
    RecognizedProviderError,
    UnrecognizedProviderError,
    decode_provider_error,
)

__all__ = [
    "ProviderClient",
    "ProviderError",
    "RecognizedProviderError",
    "UnrecognizedProviderError",
    "decode_provider_error",
]
