"""
File System Blob Repository.

Stores blobs of one container on the local filesystem:
    {storage_path}/{container}/data/{name}          content
    {storage_path}/{container}/meta/{name}.json     content type, size, upload time

Writes are atomic (write to temp, rename).
"""

import io
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional
from urllib.parse import quote

from tablerepo.domain.interfaces.blob_repository import IBlobRepository
from tablerepo.domain.models.exceptions import BlobNotFoundError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class FileSystemBlobRepository(IBlobRepository):
    """
    IBlobRepository over a local directory.
    
    Usage:
        blobs = FileSystemBlobRepository("./data/blobs", "avatars",
                                         base_url="https://cdn.example.com/avatars")
        with open("ada.png", "rb") as f:
            blobs.upload_blob_data("users/ada.png", f, "image/png")
        blobs.get_blob_url("users/ada.png")
    """
    
    def __init__(self, storage_path: str, container: str, base_url: Optional[str] = None):
        """
        Initialize blob repository.
        
        Args:
            storage_path: Base directory for all containers
            container: Container (directory) name
            base_url: Public URL prefix of the container; file:// URLs when omitted
        """
        if not container or "/" in container or "\\" in container or container in (".", ".."):
            raise ValueError(f"Invalid container name: {container!r}")
        self._container = container
        self._root = Path(storage_path) / container
        self._data_path = self._root / "data"
        self._meta_path = self._root / "meta"
        self._base_url = base_url.rstrip("/") if base_url else None
        
        self._data_path.mkdir(parents=True, exist_ok=True)
        self._meta_path.mkdir(parents=True, exist_ok=True)
    
    @property
    def container(self) -> str:
        return self._container
    
    def delete_blob(self, name: str) -> None:
        data_file = self._data_file(name)
        meta_file = self._meta_file(name)
        if not data_file.exists():
            return
        data_file.unlink()
        if meta_file.exists():
            meta_file.unlink()
        logger.debug(f"Deleted blob {self._container}/{name}")
    
    def get_blob_data(self, name: str) -> BinaryIO:
        data_file = self._data_file(name)
        if not data_file.is_file():
            raise BlobNotFoundError(name)
        return io.BytesIO(data_file.read_bytes())
    
    def get_blob_url(self, name: str) -> str:
        if self._base_url:
            return f"{self._base_url}/{quote(self._normalize(name))}"
        return self._data_file(name).resolve().as_uri()
    
    def upload_blob_data(self, name: str, data: BinaryIO, content_type: str) -> None:
        data_file = self._data_file(name)
        data_file.parent.mkdir(parents=True, exist_ok=True)
        
        temp_file = data_file.with_name(f"{data_file.name}.tmp.{uuid.uuid4().hex}")
        size = 0
        try:
            with open(temp_file, "wb") as out:
                while True:
                    chunk = data.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    out.write(chunk)
                    size += len(chunk)
            temp_file.replace(data_file)
        finally:
            if temp_file.exists():
                temp_file.unlink()
        
        self._write_meta(name, {
            "content_type": content_type,
            "size": size,
            "uploaded_at": datetime.now(timezone.utc).isoformat(),
        })
        logger.debug(f"Uploaded blob {self._container}/{name} ({size} bytes, {content_type})")
    
    def get_content_type(self, name: str) -> Optional[str]:
        """Content type recorded at upload, or None if the blob is unknown."""
        meta_file = self._meta_file(name)
        if not meta_file.is_file():
            return None
        return json.loads(meta_file.read_text(encoding="utf-8")).get("content_type")
    
    def exists(self, name: str) -> bool:
        return self._data_file(name).is_file()
    
    # ── Internals ─────────────────────────────────────────
    
    @staticmethod
    def _normalize(name: str) -> str:
        if not name:
            raise ValueError("Blob name must not be empty")
        parts = name.replace("\\", "/").split("/")
        # Every segment must name a file or directory below the container
        if any(part in ("", ".", "..") for part in parts):
            raise ValueError(f"Invalid blob name: {name!r}")
        return str(PurePosixPath(*parts))
    
    def _data_file(self, name: str) -> Path:
        return self._data_path / self._normalize(name)
    
    def _meta_file(self, name: str) -> Path:
        return self._meta_path / f"{self._normalize(name)}.json"
    
    def _write_meta(self, name: str, meta: dict) -> None:
        meta_file = self._meta_file(name)
        meta_file.parent.mkdir(parents=True, exist_ok=True)
        temp_file = meta_file.with_name(f"{meta_file.name}.tmp.{uuid.uuid4().hex}")
        temp_file.write_text(json.dumps(meta), encoding="utf-8")
        temp_file.replace(meta_file)
