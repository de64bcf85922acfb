"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from gl07_gateway.adapters.sources import SettingsSourceSystems
from gl07_gateway.config import load_settings

CONFIG = """
[paths]
base = "{base}"
database = "{base}/db/processing.db"

[unit4]
base_url = "https://unit4.example.com"
token_url = "https://auth.example.com/token"
client_id = "client"
client_secret = "secret"
tenant_id = "acme"

[transform]
default_currency = "NOK"

[cleanup]
retention_days = 30

[[sources]]
id = 1
code = "ERP"
name = "ERP export"
folder = "erp"
batch_id_prefix = "GL07"

[sources.report_setup]
report_id = "GL07"
variant = 4

[[sources]]
id = 2
code = "OLD"
folder = "old"
active = false
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(CONFIG.format(base=tmp_path.as_posix()))
    return path


class TestLoadSettings:
    def test_sections(self, config_file: Path, tmp_path: Path) -> None:
        settings = load_settings(config_file)

        assert settings.paths.base == tmp_path
        assert settings.paths.database.parent.is_dir()
        assert settings.unit4.tenant_id == "acme"
        assert settings.unit4.scope == "api"
        assert settings.unit4.batch_path == "/v1/financial-transaction-batch"
        assert settings.transform.default_currency == "NOK"
        assert settings.cleanup.retention_days == 30

    def test_source_systems(self, config_file: Path) -> None:
        sources = load_settings(config_file).sources

        erp = sources[0].to_domain()
        assert erp.batch_id_prefix == "GL07"
        assert erp.provider == "local"
        assert erp.pattern == "*.xml"
        assert erp.transformer == "ABWTransaction"
        assert erp.report_setup.variant == 4
        assert sources[1].to_domain().name == "OLD"

    def test_expands_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        path = tmp_path / "config.toml"
        path.write_text('[paths]\nbase = "~/files"\ndatabase = "~/db/log.db"\n')

        settings = load_settings(path)

        assert settings.paths.base == tmp_path / "files"


class TestSettingsSourceSystems:
    def test_lookup_ignores_case(self, config_file: Path) -> None:
        catalogue = SettingsSourceSystems(load_settings(config_file).sources)

        assert catalogue.get_by_code("erp").id == 1
        assert catalogue.get_by_code("missing") is None

    def test_active_only(self, config_file: Path) -> None:
        catalogue = SettingsSourceSystems(load_settings(config_file).sources)
        assert [s.code for s in catalogue.get_active()] == ["ERP"]
