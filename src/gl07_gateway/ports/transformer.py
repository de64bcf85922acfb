"""Transformer port - interface for source format to Unit4 conversion."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import SourceSystem
    from ..domain.unit4 import TransactionBatchRequest


class TransformerPort(ABC):
    """Interface for converting file content into a Unit4 batch."""

    transformer_type: str

    @abstractmethod
    def can_handle(self, content: str) -> bool:
        """Cheap check whether content looks like this transformer's format."""
        pass

    @abstractmethod
    def transform(
        self, content: str, source: "SourceSystem"
    ) -> "TransactionBatchRequest":
        """Convert file content using the source system's overrides."""
        pass
