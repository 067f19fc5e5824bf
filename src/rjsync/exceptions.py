"""
rjsync exception hierarchy.

Provides typed exceptions for better error handling and clearer error messages.

Exception Hierarchy:
    RjsyncError (base)
    ├── ConfigurationError - Config file issues, missing settings
    ├── IdentifierError - Folder name carries no (or an ambiguous) RJ code
    ├── ScanError - Sync run failures
    │   ├── DiscoveryError - Folder listing failures
    │   ├── CatalogError - Catalog query failures
    │   └── ScanAbortedError - Engine reached the FAILED state
    ├── NetworkError - External service communication failures
    │   ├── MetadataSourceError - Work metadata fetch/parse failures
    │   └── CoverFetchError - Cover image download failures
    └── AssetError - Cover image write/delete failures
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class RjsyncError(Exception):
    """Base exception for all rjsync errors."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """
        Initialize rjsync exception.

        Args:
            message: Human-readable error message
            details: Optional structured error details for logging/debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RjsyncError):
    """Configuration file or settings error."""

    def __init__(
        self,
        message: str,
        *,
        config_file: Path | str | None = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if config_file:
            details["config_file"] = str(config_file)
        if field:
            details["field"] = field
        super().__init__(message, details=details)
        self.config_file = config_file
        self.field = field


# =============================================================================
# Identifier Errors
# =============================================================================


class IdentifierError(RjsyncError, ValueError):
    """Folder name does not carry exactly one RJ work code."""

    def __init__(self, message: str, *, name: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["name"] = name
        super().__init__(message, details=details)
        self.name = name


# =============================================================================
# Scan Errors
# =============================================================================


class ScanError(RjsyncError):
    """Sync run failure."""

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        work_id: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if stage:
            details["stage"] = stage
        if work_id is not None:
            details["work_id"] = work_id
        super().__init__(message, details=details)
        self.stage = stage
        self.work_id = work_id


class DiscoveryError(ScanError):
    """Listing candidate folders failed."""

    def __init__(self, message: str, *, root_dir: Path | str | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("stage", "ingesting")
        details = kwargs.get("details", {})
        if root_dir:
            details["root_dir"] = str(root_dir)
        kwargs["details"] = details
        super().__init__(message, **kwargs)
        self.root_dir = root_dir


class CatalogError(ScanError):
    """Catalog query failure."""

    def __init__(
        self,
        message: str,
        *,
        database: Path | str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.get("details", {})
        if database:
            details["database"] = str(database)
        kwargs["details"] = details
        super().__init__(message, **kwargs)
        self.database = database


class ScanAbortedError(ScanError):
    """The reconciliation engine reached its terminal FAILED state."""

    pass


# =============================================================================
# Network Errors
# =============================================================================


class NetworkError(RjsyncError):
    """External service communication failure."""

    def __init__(
        self,
        message: str,
        *,
        service: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if service:
            details["service"] = service
        if url:
            details["url"] = url
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details=details)
        self.service = service
        self.url = url
        self.status_code = status_code


class MetadataSourceError(NetworkError):
    """Work metadata could not be fetched or parsed."""

    def __init__(self, message: str, *, work_id: int | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("service", "hvdb")
        details = kwargs.get("details", {})
        if work_id is not None:
            details["work_id"] = work_id
        kwargs["details"] = details
        super().__init__(message, **kwargs)
        self.work_id = work_id


class CoverFetchError(NetworkError):
    """Cover image download failure."""

    def __init__(self, message: str, *, rjcode: str | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("service", "hvdb")
        details = kwargs.get("details", {})
        if rjcode:
            details["rjcode"] = rjcode
        kwargs["details"] = details
        super().__init__(message, **kwargs)
        self.rjcode = rjcode


# =============================================================================
# Asset Errors
# =============================================================================


class AssetError(RjsyncError):
    """Cover image file operation failure."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if path:
            details["path"] = str(path)
        super().__init__(message, details=details)
        self.path = path


# =============================================================================
# Convenience Aliases
# =============================================================================

ConfigError = ConfigurationError
