"""Base repository interface for ledger records."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, List

T = TypeVar('T')


class Repository(ABC, Generic[T]):
    """
    Record store keyed by integer id.

    The generation pipeline only depends on this interface plus the
    status/image methods of the concrete ledger, so the JSON files can be
    replaced by a database without touching the services.
    """

    @abstractmethod
    def get(self, entity_id: int) -> Optional[T]:
        """Return the record, or None if it does not exist."""
        pass

    @abstractmethod
    def list(self) -> List[T]:
        pass

    @abstractmethod
    def save(self, entity: T) -> T:
        """Insert or replace the record under its id."""
        pass

    @abstractmethod
    def delete(self, entity_id: int) -> bool:
        """Remove the record. False if there was nothing to remove."""
        pass
