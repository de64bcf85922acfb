"""Source system catalogue read from the `[[sources]]` config tables."""

from ...config import SourceSystemConfig
from ...domain.models import SourceSystem
from ...ports.source_systems import SourceSystemPort


class SettingsSourceSystems(SourceSystemPort):
    def __init__(self, sources: list[SourceSystemConfig]) -> None:
        self.sources = [s.to_domain() for s in sources]

    def get_by_code(self, code: str) -> SourceSystem | None:
        wanted = code.strip().lower()
        for source in self.sources:
            if source.code.lower() == wanted:
                return source
        return None

    def get_active(self) -> list[SourceSystem]:
        return [s for s in self.sources if s.active]
