"""
Tests de la configuration INI
"""

import textwrap

import pytest

from hostmeta.core.config import AgentConfig, PushConfig, RetrySettings, create_default_config
from hostmeta.core.logger import LogSettings


def write_config(tmp_path, content):
    path = tmp_path / "config.ini"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return str(path)


class TestDefaults:

    def test_missing_file_uses_defaults(self, tmp_path):
        config = AgentConfig(str(tmp_path / "absent.ini"))
        pcfg = config.get_push_config()

        assert pcfg == PushConfig()
        assert pcfg.interval == 1800
        assert pcfg.retry_settings == RetrySettings()
        assert config.get_resource_attributes() == {}

    def test_api_key_hidden_from_repr(self):
        assert "secret" not in repr(PushConfig(api_key="secret"))


class TestPushConfig:

    def test_values_from_file(self, tmp_path):
        path = write_config(tmp_path, """
            [intake]
            url = https://intake.example.com/
            api_key = abc123
            timeout = 30
            insecure_skip_verify = true

            [host_metadata]
            use_resource_metadata = false
            hostname = forced-host
            tags = env:prod, team:infra
            tag_attributes =
                ^deployment\\.
                ^k8s\\.(pod|node),name
            interval = 600

            [retry]
            enabled = false
            max_attempts = 2
            initial_interval = 1.5
        """)
        pcfg = AgentConfig(path).get_push_config()

        assert pcfg.metrics_endpoint == "https://intake.example.com"
        assert pcfg.api_key == "abc123"
        assert pcfg.timeout == 30.0
        assert pcfg.insecure_skip_verify is True
        assert pcfg.use_resource_metadata is False
        assert pcfg.hostname == "forced-host"
        assert pcfg.config_tags == ("env:prod", "team:infra")
        assert pcfg.tag_attributes == ("^deployment\\.", "^k8s\\.(pod|node),name")
        assert pcfg.interval == 600
        assert pcfg.retry_settings.enabled is False
        assert pcfg.retry_settings.max_attempts == 2
        assert pcfg.retry_settings.initial_interval == 1.5
        assert pcfg.retry_settings.multiplier == RetrySettings().multiplier

    def test_multiline_tags(self, tmp_path):
        path = write_config(tmp_path, """
            [host_metadata]
            tags =
                env:prod
                team:infra,region:eu
        """)
        assert AgentConfig(path).get_push_config().config_tags == ("env:prod", "team:infra", "region:eu")


class TestResourceAttributes:

    def test_values_are_coerced(self, tmp_path):
        path = write_config(tmp_path, """
            [resource_attributes]
            cloud.provider = gcp
            host.name = vm-1
            host.cpu.count = 4
            host.load = 0.5
            k8s.enabled = TRUE
            service.version = 1.2.3
            weird.name = infinity
        """)
        attrs = AgentConfig(path).get_resource_attributes()

        assert attrs == {
            "cloud.provider": "gcp",
            "host.name": "vm-1",
            "host.cpu.count": 4,
            "host.load": 0.5,
            "k8s.enabled": True,
            "service.version": "1.2.3",
            "weird.name": "infinity",
        }

    def test_key_case_is_preserved(self, tmp_path):
        path = write_config(tmp_path, """
            [resource_attributes]
            ec2.tag.Name = web
        """)
        assert AgentConfig(path).get_resource_attributes() == {"ec2.tag.Name": "web"}


class TestValidate:

    def test_defaults_lack_api_key(self, tmp_path, capsys):
        config = AgentConfig(str(tmp_path / "absent.ini"))
        assert config.validate() is False
        assert "Clé d'API manquante" in capsys.readouterr().out

    def test_valid_configuration(self, tmp_path):
        config = AgentConfig(str(tmp_path / "absent.ini"))
        config.set("intake", "api_key", "abc123")
        assert config.validate() is True

    @pytest.mark.parametrize("section,option,value", [
        ("intake", "url", "ftp://intake"),
        ("agent", "log_level", "VERBOSE"),
        ("host_metadata", "interval", "0"),
        ("host_metadata", "interval", "soon"),
        ("retry", "max_attempts", "-1"),
        ("retry", "multiplier", "0.5"),
        ("retry", "randomization_factor", "2"),
    ])
    def test_invalid_values(self, tmp_path, section, option, value):
        config = AgentConfig(str(tmp_path / "absent.ini"))
        config.set("intake", "api_key", "abc123")
        config.set(section, option, value)
        assert config.validate() is False

    def test_unbounded_retries_are_rejected(self, tmp_path):
        config = AgentConfig(str(tmp_path / "absent.ini"))
        config.set("intake", "api_key", "abc123")
        config.set("retry", "max_attempts", "0")
        config.set("retry", "max_elapsed_time", "0")
        assert config.validate() is False


class TestCreateDefaultConfig:

    def test_file_is_written_and_reloaded(self, tmp_path):
        path = str(tmp_path / "sub" / "config.ini")
        create_default_config(path)

        reloaded = AgentConfig(path)
        assert reloaded.get_push_config() == PushConfig()
        assert reloaded.get("agent", "log_level") == "INFO"


class TestLogSettings:

    def test_from_config(self, tmp_path):
        path = write_config(tmp_path, """
            [agent]
            log_level = DEBUG

            [logging]
            log_file = /tmp/hostmeta-test/agent.log
            max_log_size = 2048
            backup_count = 2
        """)
        settings = LogSettings.from_config(AgentConfig(path))
        assert settings == LogSettings(level="DEBUG", log_file="/tmp/hostmeta-test/agent.log",
                                       max_bytes=2048, backup_count=2)

    def test_without_config(self):
        settings = LogSettings.from_config(None)
        assert settings.level == "INFO"
        assert settings.log_file.endswith("watchman-host-metadata.log")
