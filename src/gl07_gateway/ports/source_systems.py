"""Source system port - interface for the source system catalogue."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import SourceSystem


class SourceSystemPort(ABC):
    """Read-only access to configured source systems."""

    @abstractmethod
    def get_by_code(self, code: str) -> "SourceSystem | None":
        pass

    @abstractmethod
    def get_active(self) -> list["SourceSystem"]:
        pass
