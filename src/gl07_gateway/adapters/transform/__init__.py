"""Transformer adapters."""

import logging
from collections.abc import Callable

from ...config import TransformConfig
from ...domain.errors import UnsupportedTransformerError
from ...ports.transformer import TransformerPort
from .abw import AbwTransactionTransformer

__all__ = ["AbwTransactionTransformer", "TransformerRegistry", "create_transformer_registry"]

logger = logging.getLogger(__name__)


class TransformerRegistry:
    """Look up transformers by their type key, ignoring case."""

    def __init__(self) -> None:
        self._factories: dict[str, tuple[str, Callable[[], TransformerPort]]] = {}
        self._instances: dict[str, TransformerPort] = {}

    def register(self, transformer_type: str, factory: Callable[[], TransformerPort]) -> None:
        self._factories[transformer_type.lower()] = (transformer_type, factory)

    @property
    def available(self) -> list[str]:
        return [name for name, _ in self._factories.values()]

    def get(self, transformer_type: str) -> TransformerPort:
        key = (transformer_type or "").lower()
        if key not in self._factories:
            available = ", ".join(self.available) or "none"
            raise UnsupportedTransformerError(
                f"Transformer '{transformer_type}' is not registered. "
                f"Available transformers: {available}"
            )
        if key not in self._instances:
            self._instances[key] = self._factories[key][1]()
            logger.debug(f"Selected transformer: {self._factories[key][0]}")
        return self._instances[key]


def create_transformer_registry(config: TransformConfig) -> TransformerRegistry:
    """Create the registry of built-in transformers."""
    registry = TransformerRegistry()
    registry.register(
        AbwTransactionTransformer.transformer_type,
        lambda: AbwTransactionTransformer(default_currency=config.default_currency),
    )
    return registry
