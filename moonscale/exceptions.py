from typing import Any, Dict, Optional

from moonscale.schemas.kubernetes import KindDescriptor


class AppException(Exception):
    """Base application error carrying a stable code and structured details."""

    def __init__(self, message: str, *, code: str = "APP_ERROR", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_payload(self) -> Dict[str, Any]:
        """Build the standard error payload."""
        return {
            "success": False,
            "error": {
                "message": self.message,
                "code": self.code,
                **({"details": self.details} if self.details else {}),
            },
        }


class ApplyError(AppException):
    """Any failure of the apply path."""


class MissingTypeMetadata(ApplyError):
    def __init__(self, reason: str = "Document has no type metadata") -> None:
        super().__init__(reason, code="MISSING_TYPE_METADATA")


class UnknownResourceType(ApplyError):
    def __init__(self, kind: KindDescriptor) -> None:
        super().__init__(
            f"Cannot apply document for unknown type {kind.api_version}/{kind.kind}",
            code="UNKNOWN_RESOURCE_TYPE",
            details={"group": kind.group, "version": kind.version, "kind": kind.kind},
        )
        self.kind = kind


class ApplyFailed(ApplyError):
    def __init__(self, kind: KindDescriptor, name: str, cause: BaseException) -> None:
        super().__init__(
            f"Failed to apply {kind.kind} {name!r}: {cause}",
            code="APPLY_FAILED",
            details={"kind": kind.kind, "api_version": kind.api_version, "name": name},
        )
        self.kind = kind
        self.name = name
        self.cause = cause


class CredentialError(AppException):
    """Any failure of the credential lookup."""


class SecretNotFound(CredentialError):
    def __init__(self, secret_name: str, namespace: str) -> None:
        super().__init__(
            f"Failed to get secret {namespace}/{secret_name}",
            code="SECRET_NOT_FOUND",
            details={"secret": secret_name, "namespace": namespace},
        )
        self.secret_name = secret_name
        self.namespace = namespace


class KeyNotFound(CredentialError):
    def __init__(self, secret_name: str, key: str) -> None:
        super().__init__(
            f"Secret {secret_name} has no key {key!r}",
            code="KEY_NOT_FOUND",
            details={"secret": secret_name, "key": key},
        )
        self.secret_name = secret_name
        self.key = key


class InvalidCredentialEncoding(CredentialError):
    def __init__(self, secret_name: str, key: str) -> None:
        super().__init__(
            f"Value of {key!r} in secret {secret_name} is not valid UTF-8",
            code="INVALID_CREDENTIAL_ENCODING",
            details={"secret": secret_name, "key": key},
        )
        self.secret_name = secret_name
        self.key = key
