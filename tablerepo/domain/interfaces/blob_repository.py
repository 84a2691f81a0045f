"""
Blob Repository Interface.

Named binary objects stored next to the table data (attachments,
exports, images), addressed by name within one container.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO


class IBlobRepository(ABC):
    """Blob container abstraction."""
    
    @abstractmethod
    def delete_blob(self, name: str) -> None:
        """
        Delete a blob.
        
        Deleting a missing blob is a no-op.
        """
        pass
    
    @abstractmethod
    def get_blob_data(self, name: str) -> BinaryIO:
        """
        Open a blob for reading.
        
        Returns:
            Readable binary stream positioned at the start
            
        Raises:
            BlobNotFoundError: If the blob does not exist
        """
        pass
    
    @abstractmethod
    def get_blob_url(self, name: str) -> str:
        """
        Address of a blob.
        
        Does not check that the blob exists.
        """
        pass
    
    @abstractmethod
    def upload_blob_data(self, name: str, data: BinaryIO, content_type: str) -> None:
        """
        Create or replace a blob from a readable stream.
        
        Args:
            name: Blob name
            data: Readable binary stream
            content_type: MIME type stored with the blob
        """
        pass
