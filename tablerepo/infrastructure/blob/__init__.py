"""Blob storage."""

from .filesystem_blob_repository import FileSystemBlobRepository

__all__ = ["FileSystemBlobRepository"]
