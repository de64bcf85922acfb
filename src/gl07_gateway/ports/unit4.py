"""Unit4 port - interface for posting transaction batches."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.unit4 import BatchResponse, TransactionBatchRequest


class Unit4Port(ABC):
    """Interface for the Unit4 transaction batch API."""

    @abstractmethod
    def post_batch(self, request: "TransactionBatchRequest") -> "BatchResponse":
        """Submit a batch.

        HTTP failures come back as a response with status "Error".
        Token problems raise ConfigurationError or AuthenticationError.
        """
        pass

    @abstractmethod
    def test_connection(self) -> bool:
        """Check that a token can be obtained."""
        pass
