"""Service layer for bundlectl operations."""

from bundlectl.services.uploads import UploadService

__all__ = ["UploadService"]
