"""
Core package initializer.

This package provides core utilities such as token handling, password
hashing, request de-duplication and rate limiting.
"""

from .security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
    is_valid_internal_token,
)
from .single_flight import SingleFlight

__all__ = [
    # Security
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "hash_password",
    "verify_password",
    "is_valid_internal_token",
    # Coordination
    "SingleFlight",
]
