"""
Tests des sondes locales et des fournisseurs de hostname
"""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from hostmeta.collectors.ec2 import Ec2Collector, Ec2HostInfo
from hostmeta.collectors.hardware import HardwareCollector
from hostmeta.collectors.processes import ProcessesCollector
from hostmeta.collectors.source import (
    ChainSourceProvider,
    ConfigSourceProvider,
    Source,
    SourceKind,
    SystemSourceProvider,
)
from hostmeta.collectors.system import SystemCollector, SystemHostInfo
from hostmeta.core.errors import SourceError

from .conftest import FakeSystem


logger = logging.getLogger("tests.hostmeta")


def http_response(status_code=200, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


class TestSourceProviders:

    def test_config_provider(self):
        assert ConfigSourceProvider(" web-1 ").source() == Source(SourceKind.HOSTNAME, "web-1")
        with pytest.raises(SourceError):
            ConfigSourceProvider("").source()

    @pytest.mark.parametrize("info,expected", [
        (SystemHostInfo(os="web-1", fqdn="web-1.example.com"), "web-1.example.com"),
        (SystemHostInfo(os="web-1", fqdn="web-1"), "web-1"),
        (SystemHostInfo(os="web-1", fqdn=""), "web-1"),
    ])
    def test_system_provider(self, info, expected):
        assert SystemSourceProvider(FakeSystem(info)).source().identifier == expected

    def test_system_provider_without_hostname(self):
        with pytest.raises(SourceError):
            SystemSourceProvider(FakeSystem(SystemHostInfo())).source()

    def test_chain_returns_first_success(self):
        system = FakeSystem(SystemHostInfo(os="os-host"))
        chain = ChainSourceProvider([ConfigSourceProvider(""), SystemSourceProvider(system)], logger)
        assert chain.source() == Source(SourceKind.HOSTNAME, "os-host")

    def test_chain_stops_at_first_success(self):
        system = FakeSystem(SystemHostInfo(os="os-host"))
        chain = ChainSourceProvider([ConfigSourceProvider("configured"), SystemSourceProvider(system)])
        assert chain.source().identifier == "configured"
        assert system.calls == 0

    def test_chain_exhausted(self):
        chain = ChainSourceProvider([ConfigSourceProvider(""), SystemSourceProvider(FakeSystem())])
        with pytest.raises(SourceError):
            chain.source()


class TestSystemCollector:

    def test_collect(self, monkeypatch):
        monkeypatch.setattr("socket.gethostname", lambda: "web-1")
        monkeypatch.setattr("socket.getfqdn", lambda name: f"{name}.example.com")
        assert SystemCollector(logger).collect() == SystemHostInfo(os="web-1", fqdn="web-1.example.com")

    def test_errors_give_empty_values(self, monkeypatch):
        def broken():
            raise OSError("no hostname")

        monkeypatch.setattr("socket.gethostname", broken)
        collector = SystemCollector(logger)
        assert collector.collect() == SystemHostInfo()
        assert len(collector.collection_errors) == 1


class TestEc2Collector:

    @patch("hostmeta.collectors.ec2.requests.get")
    @patch("hostmeta.collectors.ec2.requests.put")
    def test_imdsv2(self, mock_put, mock_get):
        mock_put.return_value = http_response(200, "token-123\n")
        mock_get.side_effect = [
            http_response(200, "i-0abc"),
            http_response(200, "ip-10-0-0-1.ec2.internal"),
        ]

        info = Ec2Collector(logger, timeout=0.5).collect()

        assert info == Ec2HostInfo(instance_id="i-0abc", ec2_hostname="ip-10-0-0-1.ec2.internal")
        assert mock_put.call_args.kwargs["timeout"] == 0.5
        first_get = mock_get.call_args_list[0]
        assert first_get.args[0] == "http://169.254.169.254/latest/meta-data/instance-id"
        assert first_get.kwargs["headers"] == {"X-aws-ec2-metadata-token": "token-123"}

    @patch("hostmeta.collectors.ec2.requests.get")
    @patch("hostmeta.collectors.ec2.requests.put")
    def test_imdsv1_fallback(self, mock_put, mock_get):
        mock_put.return_value = http_response(403)
        mock_get.side_effect = [http_response(200, "i-0abc"), http_response(200, "ec2-host")]

        info = Ec2Collector(logger).collect()

        assert info.instance_id == "i-0abc"
        assert mock_get.call_args_list[0].kwargs["headers"] == {}

    @patch("hostmeta.collectors.ec2.requests.get")
    @patch("hostmeta.collectors.ec2.requests.put")
    def test_not_on_ec2(self, mock_put, mock_get):
        mock_put.side_effect = requests.exceptions.ConnectTimeout("timed out")
        mock_get.side_effect = requests.exceptions.ConnectTimeout("timed out")

        assert Ec2Collector(logger).collect() == Ec2HostInfo()
        # Pas de requête hostname sans ID d'instance
        assert mock_get.call_count == 1


class TestHardwareCollector:

    def test_gohai_is_json_string(self):
        payload = HardwareCollector(logger).collect()

        assert list(payload) == ["gohai"]
        gohai = json.loads(payload["gohai"])
        assert set(gohai) == {"cpu", "memory", "filesystem", "network", "platform"}
        assert gohai["memory"]["total"].endswith("kB")
        assert "interfaces" in gohai["network"]


class TestProcessesCollector:

    def test_snapshot_shape(self):
        payload = ProcessesCollector(logger).collect("web-1")

        assert payload["meta"] == {"host": "web-1"}
        ((timestamp, rows),) = payload["processes"]["snaps"]
        assert isinstance(timestamp, int)
        assert rows
        assert all(len(row) == 7 for row in rows)
        assert [row[4] for row in rows] == sorted((row[4] for row in rows), reverse=True)
