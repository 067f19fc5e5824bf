"""rjsync - reconcile a voice-work catalog with the folders on disk."""

from rjsync.exceptions import (
    AssetError,
    CatalogError,
    ConfigurationError,
    CoverFetchError,
    DiscoveryError,
    IdentifierError,
    MetadataSourceError,
    NetworkError,
    RjsyncError,
    ScanAbortedError,
    ScanError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Base exception
    "RjsyncError",
    # Configuration
    "ConfigurationError",
    # Identifiers
    "IdentifierError",
    # Scan stages
    "ScanError",
    "DiscoveryError",
    "CatalogError",
    "ScanAbortedError",
    # Network
    "NetworkError",
    "MetadataSourceError",
    "CoverFetchError",
    # Files
    "AssetError",
]
