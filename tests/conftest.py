"""
Fixtures partagées des tests de l'agent de métadonnées
"""

import logging
from dataclasses import dataclass, field
from typing import List

import pytest

from hostmeta.collectors.ec2 import Ec2HostInfo
from hostmeta.collectors.source import Source, SourceKind, SourceProvider
from hostmeta.collectors.system import SystemHostInfo
from hostmeta.core.config import BuildInfo, PushConfig, RetrySettings
from hostmeta.core.errors import SourceError
from hostmeta.core.metadata import HostProbes


class StubAgentLogger:
    """Remplace AgentLogger : pas de fichier, propagation vers caplog"""

    def __init__(self, name: str = "tests.hostmeta"):
        self.logger = logging.getLogger(name)

    def get_logger(self) -> logging.Logger:
        return self.logger


@dataclass
class FakeEc2:
    info: Ec2HostInfo = field(default_factory=Ec2HostInfo)
    calls: int = 0

    def collect(self) -> Ec2HostInfo:
        self.calls += 1
        return self.info


@dataclass
class FakeSystem:
    info: SystemHostInfo = field(default_factory=SystemHostInfo)
    calls: int = 0

    def collect(self) -> SystemHostInfo:
        self.calls += 1
        return self.info


@dataclass
class FakeHardware:
    payload: dict = field(default_factory=lambda: {"gohai": '{"cpu":{"cpu_cores":"4"}}'})

    def collect(self) -> dict:
        return self.payload


@dataclass
class FakeProcesses:
    hostnames: List[str] = field(default_factory=list)

    def collect(self, hostname: str = "") -> dict:
        self.hostnames.append(hostname)
        return {"processes": {"snaps": [[1700000000, []]]}, "meta": {"host": hostname}}


class FakeProvider(SourceProvider):
    def __init__(self, source=None, error=None):
        self._source = source
        self._error = error
        self.calls = 0

    def source(self) -> Source:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._source


@pytest.fixture
def agent_logger():
    return StubAgentLogger()


@pytest.fixture
def build_info():
    return BuildInfo(command="watchman-host-metadata", version="1.2.3")


@pytest.fixture
def pcfg():
    return PushConfig(
        metrics_endpoint="https://intake.example.com",
        api_key="0123456789abcdef0123456789abcdef",
        timeout=5.0,
        config_tags=("env:test", "team:infra"),
        retry_settings=RetrySettings(max_attempts=3, initial_interval=0.01, max_interval=0.02),
    )


@pytest.fixture
def probes():
    return HostProbes(
        ec2=FakeEc2(Ec2HostInfo(instance_id="i-probe", ec2_hostname="ip-10-0-0-1.ec2.internal")),
        system=FakeSystem(SystemHostInfo(os="probe-host", fqdn="probe-host.example.com")),
        hardware=FakeHardware(),
        processes=FakeProcesses(),
    )


@pytest.fixture
def hostname_provider():
    return FakeProvider(Source(SourceKind.HOSTNAME, "provider-host"))


@pytest.fixture
def failing_provider():
    return FakeProvider(error=SourceError("no hostname"))
