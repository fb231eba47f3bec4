"""
Tests for configuration loading and the configuration models.
"""

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from node_exporter_installer.core.config import loader
from node_exporter_installer.core.config.loader import ConfigError, load_config, read_config_file
from node_exporter_installer.core.models.config import InstallConfig


@pytest.fixture(autouse=True)
def isolated_defaults(monkeypatch, tmp_path):
    monkeypatch.delenv("NEI_CONFIG", raising=False)
    monkeypatch.setattr(loader, "DEFAULT_CONFIG_FILE", tmp_path / "absent.yml")


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "installer.yml"
    path.write_text(textwrap.dedent(content))
    return path


class TestInstallConfig:
    def test_defaults(self):
        config = InstallConfig()
        assert config.service_user == "node_exporter"
        assert config.service_group == "node_exporter"
        assert config.port == 9100
        assert config.service_name == "node_exporter"
        assert config.service_file == Path("/etc/systemd/system/node_exporter.service")
        assert config.metrics_url == "http://<your_server_ip>:9100/metrics"

    def test_unit_named_after_user(self):
        config = InstallConfig(service_user="web_metrics")
        assert config.service_file.name == "web_metrics.service"
        assert config.service_name == "web_metrics"

    @pytest.mark.parametrize("port", [0, 65536, -1])
    def test_port_range(self, port):
        with pytest.raises(ValidationError):
            InstallConfig(port=port)

    @pytest.mark.parametrize("name", ["../x", "Root", "a b", "web/metrics", "-x", ""])
    def test_invalid_account_names(self, name):
        with pytest.raises(ValidationError):
            InstallConfig(service_user=name)
        with pytest.raises(ValidationError):
            InstallConfig(service_group=name)

    @pytest.mark.parametrize("name", ["node_exporter", "_metrics", "web-metrics2", "machine$"])
    def test_valid_account_names(self, name):
        assert InstallConfig(service_user=name, service_group=name).service_user == name

    def test_frozen(self):
        config = InstallConfig()
        with pytest.raises(ValidationError):
            config.port = 9200

    def test_unknown_field(self):
        with pytest.raises(ValidationError):
            InstallConfig(prot=9100)


class TestLoadConfig:
    def test_no_file_gives_defaults(self):
        assert load_config() == InstallConfig()

    def test_top_level_keys(self, tmp_path):
        path = _write(tmp_path, """\
            service_user: metrics
            port: 9300
        """)
        config = load_config(path)
        assert config.service_user == "metrics"
        assert config.port == 9300
        assert config.service_group == "node_exporter"

    def test_section(self, tmp_path):
        path = _write(tmp_path, """\
            node_exporter:
              service_group: monitoring
              binary_path: /opt/node_exporter/node_exporter
        """)
        config = load_config(path)
        assert config.service_group == "monitoring"
        assert config.binary_path == Path("/opt/node_exporter/node_exporter")

    def test_overrides_win(self, tmp_path):
        path = _write(tmp_path, "port: 9300\nservice_user: metrics\n")
        config = load_config(path, {"port": 9400, "service_user": None})
        assert config.port == 9400
        assert config.service_user == "metrics"

    def test_env_var(self, tmp_path, monkeypatch):
        path = _write(tmp_path, "port: 9500\n")
        monkeypatch.setenv("NEI_CONFIG", str(path))
        assert load_config().port == 9500

    def test_system_default_file(self, tmp_path, monkeypatch):
        path = _write(tmp_path, "port: 9600\n")
        monkeypatch.setattr(loader, "DEFAULT_CONFIG_FILE", path)
        assert load_config().port == 9600

    def test_empty_file(self, tmp_path):
        assert load_config(_write(tmp_path, "")) == InstallConfig()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(_write(tmp_path, "port: [9100\n"))

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            read_config_file(_write(tmp_path, "- 9100\n"))

    def test_section_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError, match="'node_exporter' to be a mapping"):
            read_config_file(_write(tmp_path, "node_exporter: yes\n"))

    def test_invalid_value(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid installer configuration"):
            load_config(_write(tmp_path, "port: 70000\n"))

    def test_account_name_outside_unit_dir(self, tmp_path):
        with pytest.raises(ConfigError, match="service_user"):
            load_config(_write(tmp_path, "service_user: ../../tmp/evil\n"))

    def test_unknown_key(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(_write(tmp_path, "listen_port: 9100\n"))
