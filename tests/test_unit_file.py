"""
Tests for unit file rendering and configuration discovery.
"""

import textwrap
from pathlib import Path

from node_exporter_installer.core.models.config import DiscoveredUnitConfig, InstallConfig
from node_exporter_installer.core.services.unit_file import (
    parse_listen_port,
    parse_unit,
    render_unit,
)

# Unit file for the default configuration, byte for byte.
DEFAULT_UNIT = """\
[Unit]
Description=Prometheus Node Exporter (user: node_exporter)
Wants=network-online.target
After=network-online.target

[Service]
User=node_exporter
Group=node_exporter
Type=simple
ExecStart=/usr/local/bin/node_exporter --web.listen-address=:9100
Restart=on-failure
RestartSec=5s

[Install]
WantedBy=multi-user.target
"""


class TestRenderUnit:
    def test_default_layout_is_stable(self):
        assert render_unit(InstallConfig()) == DEFAULT_UNIT

    def test_custom_values(self):
        text = render_unit(InstallConfig(service_user="custom", service_group="metrics", port=9900))
        assert "Description=Prometheus Node Exporter (user: custom)\n" in text
        assert "User=custom\n" in text
        assert "Group=metrics\n" in text
        assert "ExecStart=/usr/local/bin/node_exporter --web.listen-address=:9900\n" in text

    def test_binary_path_is_used(self):
        text = render_unit(InstallConfig(binary_path=Path("/opt/ne/node_exporter")))
        assert "ExecStart=/opt/ne/node_exporter --web.listen-address=:9100" in text

    def test_rendered_unit_is_discoverable(self):
        config = InstallConfig(service_user="custom", service_group="metrics", port=9900)
        assert parse_unit(render_unit(config)) == DiscoveredUnitConfig(
            user="custom", group="metrics", port=9900,
        )


class TestParseUnit:
    def test_stub_unit(self):
        text = textwrap.dedent("""\
            [Service]
            User=alice
            Group=alicegrp
            ExecStart=/bin/node_exporter --web.listen-address=:9321
        """)
        discovered = parse_unit(text)
        assert discovered.user == "alice"
        assert discovered.group == "alicegrp"
        assert discovered.port == 9321

    def test_whitespace_tolerance(self):
        text = "  User = alice  \n\tGroup=  alicegrp\nExecStart = /bin/ne --web.listen-address=:9321   \n"
        assert parse_unit(text) == DiscoveredUnitConfig(user="alice", group="alicegrp", port=9321)

    def test_missing_fields_stay_none(self):
        discovered = parse_unit("[Service]\nUser=alice\n")
        assert discovered.user == "alice"
        assert discovered.group is None
        assert discovered.port is None

    def test_empty_text(self):
        assert parse_unit("").empty

    def test_empty_value_is_ignored(self):
        assert parse_unit("User=\nGroup=\n").empty

    def test_later_assignment_wins(self):
        assert parse_unit("User=first\nUser=second\n").user == "second"

    def test_comments_are_ignored(self):
        text = "# User=ghost\n; Group=ghost\nUser=alice\n"
        discovered = parse_unit(text)
        assert discovered.user == "alice"
        assert discovered.group is None

    def test_keys_are_case_sensitive(self):
        assert parse_unit("user=alice\nDynamicUser=yes\n").user is None

    def test_exec_start_without_listen_address(self):
        assert parse_unit("ExecStart=/usr/local/bin/node_exporter\n").port is None


class TestParseListenPort:
    def test_port_only(self):
        assert parse_listen_port("/bin/ne --web.listen-address=:9100") == 9100

    def test_host_and_port(self):
        assert parse_listen_port("/bin/ne --web.listen-address=0.0.0.0:9200") == 9200

    def test_ipv6_host(self):
        assert parse_listen_port("/bin/ne --web.listen-address=[::1]:9300") == 9300

    def test_space_separated_argument(self):
        assert parse_listen_port("/bin/ne --web.listen-address :9400 --collector.systemd") == 9400

    def test_followed_by_other_flags(self):
        assert parse_listen_port("/bin/ne --web.listen-address=:9500 --no-collector.wifi") == 9500

    def test_out_of_range_port(self):
        assert parse_listen_port("/bin/ne --web.listen-address=:70000") is None

    def test_non_numeric(self):
        assert parse_listen_port("/bin/ne --web.listen-address=:metrics") is None

    def test_other_flag(self):
        assert parse_listen_port("/bin/ne --web.telemetry-path=/metrics") is None


class TestDiscoveredApply:
    def test_overrides_only_parsed_fields(self):
        config = InstallConfig(service_user="custom", service_group="grp", port=9100)
        resolved = DiscoveredUnitConfig(port=9900).apply_to(config)
        assert resolved.service_user == "custom"
        assert resolved.service_group == "grp"
        assert resolved.port == 9900

    def test_input_config_unchanged(self):
        config = InstallConfig()
        DiscoveredUnitConfig(user="alice", group="g", port=9321).apply_to(config)
        assert config.service_user == "node_exporter"
        assert config.port == 9100
