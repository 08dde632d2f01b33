"""Errors raised while composing the hosting descriptor.

Everything raised during composition is fatal: the stack aborts before any
construct is added, so a partially declared app, role or branch set never
reaches a template. ``SourceUnreachable`` is the exception; it only exists at
build-execution time and is surfaced by the diagnostics CLI.
"""
from typing import Any, Optional


class HostingError(Exception):
    """Base error carrying a machine readable code and debugging details."""

    error_code = "HOSTING_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigurationMissing(HostingError):
    """A required parameter key or secret reference does not resolve."""

    error_code = "CONFIGURATION_MISSING"


class PermissionDenied(HostingError):
    """The resolving identity is not allowed to read a parameter."""

    error_code = "PERMISSION_DENIED"


class IdentityUnavailable(HostingError):
    """Neither identity strategy produced a usable role."""

    error_code = "IDENTITY_UNAVAILABLE"


class PolicyNotAllowed(HostingError):
    """A permission statement falls outside the allowed capability set."""

    error_code = "POLICY_NOT_ALLOWED"


class DirectoryLayoutMismatch(HostingError):
    """None of the candidate working directories exist."""

    error_code = "DIRECTORY_LAYOUT_MISMATCH"


class SecretMaterialInEnvironment(HostingError):
    """An environment entry would carry secret material."""

    error_code = "SECRET_IN_ENVIRONMENT"


class InvalidReleaseTopology(HostingError):
    error_code = "INVALID_RELEASE_TOPOLOGY"


class SourceUnreachable(HostingError):
    """A build failed to fetch or build the source repository."""

    error_code = "SOURCE_UNREACHABLE"
