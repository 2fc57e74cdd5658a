"""Discovery-driven server-side apply and instance credential lookup."""

from moonscale.exceptions import (
    ApplyError,
    ApplyFailed,
    CredentialError,
    InvalidCredentialEncoding,
    KeyNotFound,
    MissingTypeMetadata,
    SecretNotFound,
    UnknownResourceType,
)
from moonscale.schemas.kubernetes import ApplyOptions, ApplyResult, KindDescriptor

__version__ = "0.1.0"

__all__ = [
    "ApplyError",
    "ApplyFailed",
    "ApplyOptions",
    "ApplyResult",
    "CredentialError",
    "InvalidCredentialEncoding",
    "KeyNotFound",
    "KindDescriptor",
    "MissingTypeMetadata",
    "SecretNotFound",
    "UnknownResourceType",
]
