"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract key-value interface for local
persistence. This allows us to:
1. Keep data in JSON files on disk for the real app
2. Use in-memory storage for testing
3. Keep the repository logic decoupled from where bytes live

The interface is intentionally tiny. Each logical key holds one whole
JSON-serializable collection, read and written wholesale.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class RecordStore(ABC):
    """
    Abstract interface for the local record store.
    
    Implementations are synchronous and single-writer.
    """
    
    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Read the payload stored under a key.
        
        Returns:
            The deserialized payload, or None if nothing is stored
            
        Raises:
            StorageError: If the backend cannot be read
        """
        pass
    
    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Replace the payload stored under a key.
        
        Args:
            key: Logical key
            value: JSON-serializable payload
            
        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ProtectedCategoryError(StorageError):
    """Attempted to delete a built-in category."""
    
    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Default category cannot be deleted: {category_id}")
