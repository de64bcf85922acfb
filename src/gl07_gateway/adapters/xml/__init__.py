"""XML adapters."""

from .parser import AbwXmlParser, normalize_namespaces

__all__ = ["AbwXmlParser", "normalize_namespaces"]
