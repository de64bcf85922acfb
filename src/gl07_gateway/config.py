"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Self

from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from .domain.models import ReportSetup, SourceSystem

DEFAULT_BASE = "~/gl07-files"
DEFAULT_DATABASE = "~/.local/share/gl07-gateway/processing.db"
DEFAULT_BATCH_PATH = "/v1/financial-transaction-batch"
DEFAULT_CURRENCY = "SEK"
DEFAULT_RETENTION_DAYS = 90
CONFIG_PATH = Path("~/.config/gl07-gateway/config.toml").expanduser()


class PathsConfig(BaseSettings):
    base: Path = Path(DEFAULT_BASE)
    database: Path = Path(DEFAULT_DATABASE)

    @field_validator("base", "database", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser()


class Unit4Config(BaseSettings):
    """Unit4 REST API and OAuth2 client-credentials settings."""

    base_url: str = ""
    batch_path: str = DEFAULT_BATCH_PATH
    tenant_id: str = ""
    token_url: str = ""
    client_id: str = ""
    client_secret: str = ""
    scope: str = "api"
    timeout: float = 30.0


class TransformConfig(BaseSettings):
    default_currency: str = DEFAULT_CURRENCY


class CleanupConfig(BaseSettings):
    retention_days: int = DEFAULT_RETENTION_DAYS


class ReportSetupConfig(BaseModel):
    report_id: str = ""
    report_name: str = ""
    variant: int | None = None
    user_id: str = ""
    company_id: str = ""


class SourceSystemConfig(BaseModel):
    """One `[[sources]]` table."""

    id: int
    code: str
    name: str = ""
    provider: str = "local"
    folder: str
    pattern: str = "*.xml"
    transformer: str = "ABWTransaction"
    active: bool = True
    interface: str | None = None
    transaction_type: str | None = None
    batch_id_prefix: str | None = None
    default_currency: str | None = None
    report_setup: ReportSetupConfig | None = None

    def to_domain(self) -> SourceSystem:
        report = None
        if self.report_setup is not None:
            report = ReportSetup(**self.report_setup.model_dump())
        return SourceSystem(
            id=self.id,
            code=self.code,
            name=self.name or self.code,
            provider=self.provider,
            folder=self.folder,
            pattern=self.pattern,
            transformer=self.transformer,
            active=self.active,
            interface=self.interface,
            transaction_type=self.transaction_type,
            batch_id_prefix=self.batch_id_prefix,
            default_currency=self.default_currency,
            report_setup=report,
        )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GL07_GATEWAY_")

    paths: PathsConfig = PathsConfig()
    unit4: Unit4Config = Unit4Config()
    transform: TransformConfig = TransformConfig()
    cleanup: CleanupConfig = CleanupConfig()
    sources: list[SourceSystemConfig] = []

    @model_validator(mode="after")
    def ensure_dirs(self) -> Self:
        self.paths.database.parent.mkdir(parents=True, exist_ok=True)
        return self


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from TOML file, falling back to defaults."""
    path = config_path or CONFIG_PATH

    if path.exists():
        with open(path, "rb") as f:
            data = tomllib.load(f)

        paths = PathsConfig(**data.get("paths", {}))
        unit4 = Unit4Config(**data.get("unit4", {}))
        transform = TransformConfig(**data.get("transform", {}))
        cleanup = CleanupConfig(**data.get("cleanup", {}))
        sources = [SourceSystemConfig(**s) for s in data.get("sources", [])]
        return Settings(
            paths=paths,
            unit4=unit4,
            transform=transform,
            cleanup=cleanup,
            sources=sources,
        )

    return Settings()
