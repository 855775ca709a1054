"""
Caller-facing translation layer.
"""

from .field_map import PROFILE_FIELD_MAP, map_profile_fields
from .gateway import IdentityGatewayTranslator, parse_bearer_token

__all__ = [
    "PROFILE_FIELD_MAP",
    "map_profile_fields",
    "IdentityGatewayTranslator",
    "parse_bearer_token",
]
