"""
Tests du point d'entrée en ligne de commande
"""

import json
import textwrap
from unittest.mock import patch

import pytest

from hostmeta import main as main_module

from .conftest import StubAgentLogger


class FakeAgentLogger(StubAgentLogger):

    def __init__(self, config=None):
        super().__init__()

    def log_config_info(self, config):
        pass


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(textwrap.dedent("""
        [intake]
        url = https://intake.example.com
        api_key = 0123456789abcdef0123456789abcdef

        [host_metadata]
        tags = env:test
        tag_attributes = ^deployment\\.

        [retry]
        max_attempts = 1

        [resource_attributes]
        datadog.host.name = web-1
        deployment.environment = prod
    """), encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def offline_agent(probes):
    with patch.object(main_module, "AgentLogger", FakeAgentLogger), \
            patch.object(main_module.HostProbes, "default", return_value=probes):
        yield


def run_main(*args):
    with patch("sys.argv", ["watchman-host-metadata", *args]):
        return main_module.main()


class TestMain:

    def test_show_writes_document(self, config_path, tmp_path, capsys):
        output = tmp_path / "document.json"
        assert run_main("-c", config_path, "-m", "show", "-o", str(output)) == 0

        document = json.loads(output.read_text(encoding="utf-8"))
        assert document["internalHostname"] == "web-1"
        assert document["host-tags"]["otel"] == ["deployment.environment:prod", "env:test"]

    @patch("hostmeta.core.sender.requests.post")
    def test_once_reports_failure(self, mock_post, config_path, capsys):
        response = mock_post.return_value.__enter__.return_value
        response.status_code = 403
        response.reason = "Forbidden"
        response.iter_content.return_value = []

        assert run_main("-c", config_path, "-m", "once") == 1
        assert mock_post.call_count == 1

    def test_invalid_tag_attributes(self, tmp_path, capsys):
        path = tmp_path / "config.ini"
        path.write_text("[host_metadata]\ntag_attributes = (unclosed\n", encoding="utf-8")

        assert run_main("-c", str(path), "-m", "show") == 1
        assert "Erreur de configuration" in capsys.readouterr().out

    def test_create_and_validate_config(self, tmp_path, capsys):
        path = str(tmp_path / "new" / "config.ini")
        assert run_main("--create-config", "-c", path) == 0
        # Pas de clé d'API dans la configuration par défaut
        assert run_main("--validate-config", "-c", path) == 1

    @pytest.mark.parametrize("mode", ["once", "service"])
    @patch("hostmeta.core.sender.requests.post")
    def test_invalid_config_is_rejected_at_startup(self, mock_post, mode, tmp_path, capsys):
        path = tmp_path / "config.ini"
        path.write_text(textwrap.dedent("""
            [intake]
            api_key = 0123456789abcdef0123456789abcdef

            [host_metadata]
            interval = 0

            [retry]
            max_attempts = 0
            max_elapsed_time = 0
        """), encoding="utf-8")

        assert run_main("-c", str(path), "-m", mode) == 1
        out = capsys.readouterr().out
        assert "Intervalle d'envoi invalide" in out
        assert "non bornée" in out
        mock_post.assert_not_called()
