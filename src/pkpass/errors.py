"""pkpass Error Taxonomy.

This module defines the error hierarchy for reading, writing and signing
pass archives, providing structured error handling with specific error
codes and context information.

Every failure is fatal for the operation that raised it: reads and writes
are all-or-nothing and nothing is retried internally.
"""

from __future__ import annotations

from typing import Any


class PkPassError(Exception):
    """Base exception for all pkpass errors.

    Attributes:
        code: Error code following the pkpass:<area>/<name> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


# --- Archive errors ---


class ZipFormatError(PkPassError):
    """Raised when the container is not a readable zip archive."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="pkpass:archive/zip_format",
            message=f"Malformed zip container: {reason}",
            details={"reason": reason, **(details or {})},
        )
        self.reason = reason


class MissingRequiredEntryError(PkPassError):
    """Raised when ``pass.json`` or ``manifest.json`` is absent from the archive."""

    def __init__(self, entry: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="pkpass:archive/missing_entry",
            message=f"Archive is missing required entry: {entry}",
            details={"entry": entry, **(details or {})},
        )
        self.entry = entry


class UnrecognizedAssetPathError(PkPassError):
    """Raised when an archive member cannot be placed in the asset table.

    Attributes:
        path: Raw archive member name
        reason: Why the resolver rejected it
    """

    def __init__(self, path: str, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="pkpass:archive/unrecognized_asset_path",
            message=f"Unrecognized asset path {path!r}: {reason}",
            details={"path": path, "reason": reason, **(details or {})},
        )
        self.path = path
        self.reason = reason


class ManifestSignatureMismatchError(PkPassError):
    """Raised when a member's digest does not match its ``manifest.json`` entry.

    This is a tamper or corruption signal and is checked on every read,
    whatever the verification policy.
    """

    def __init__(self, path: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="pkpass:archive/manifest_mismatch",
            message=f"`{path}` calculated digest didn't match the one in the manifest",
            details={"path": path, **(details or {})},
        )
        self.path = path


# --- Crypto errors ---


class SignatureVerificationFailedError(PkPassError):
    """Raised when the detached signature over ``manifest.json`` does not verify."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="pkpass:crypto/signature_verification_failed",
            message=f"Signature verification failed: {reason}",
            details={"reason": reason, **(details or {})},
        )
        self.reason = reason


class IdentityIncompleteError(PkPassError):
    """Raised when key material lacks a private key, certificate or chain."""

    def __init__(self, missing: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="pkpass:crypto/identity_incomplete",
            message=f"Signing identity is incomplete: bundle has to contain a {missing}",
            details={"missing": missing, **(details or {})},
        )
        self.missing = missing


class IdentityFieldMissingError(PkPassError):
    """Raised when the signer certificate lacks a subject field used for stamping."""

    def __init__(self, field: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="pkpass:crypto/identity_field_missing",
            message=f"Could not find {field} on signer certificate subject",
            details={"field": field, **(details or {})},
        )
        self.field = field


# --- Configuration errors ---


class TrustStoreNotConfiguredError(PkPassError):
    """Raised when verification is requested but no trust anchors are configured."""

    def __init__(self, env_var: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="pkpass:config/trust_store_missing",
            message=(
                "Signature verification requested but no trust anchors are configured. "
                f"Pass a trust store explicitly or set {env_var}."
            ),
            details={"env_var": env_var, **(details or {})},
        )
        self.env_var = env_var


# --- Asset path errors (raised by the resolver) ---


class AssetPathError(PkPassError):
    """Base class for asset path grammar violations."""

    def __init__(
        self, code: str, path: str, reason: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            code=code,
            message=f"{reason}: {path!r}",
            details={"path": path, **(details or {})},
        )
        self.path = path
        self.reason = reason


class UnrecognizedKindError(AssetPathError):
    """Filename stem is not one of the known image kinds."""

    def __init__(self, path: str, details: dict[str, Any] | None = None) -> None:
        super().__init__("pkpass:asset/unrecognized_kind", path, "unrecognized image kind", details)


class UnrecognizedVariantError(AssetPathError):
    """Density suffix is not ``2x`` or ``3x``."""

    def __init__(self, path: str, variant: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            "pkpass:asset/unrecognized_variant",
            path,
            f"unrecognized resolution variant @{variant}",
            {"variant": variant, **(details or {})},
        )
        self.variant = variant


class MalformedLocalizedPathError(AssetPathError):
    """Nested path whose directory is not a single ``<locale>.lproj``."""

    def __init__(self, path: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            "pkpass:asset/malformed_localized_path", path, "malformed localized path", details
        )


class InvalidLocaleTagError(AssetPathError):
    """``.lproj`` prefix is not a valid language tag."""

    def __init__(self, path: str, tag: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            "pkpass:asset/invalid_locale_tag",
            path,
            f"invalid locale tag {tag!r}",
            {"tag": tag, **(details or {})},
        )
        self.tag = tag
