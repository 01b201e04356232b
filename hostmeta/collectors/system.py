"""
Sonde système : nom d'hôte du système d'exploitation et FQDN
"""

import socket
from dataclasses import dataclass

from .base import BaseCollector


@dataclass(frozen=True)
class SystemHostInfo:
    """Résultat de la sonde système ("" si inconnu)"""
    os: str = ""
    fqdn: str = ""


class SystemCollector(BaseCollector):
    """
    Récupère le nom d'hôte déclaré par le système et son FQDN
    """

    def collect(self) -> SystemHostInfo:
        self._start_collection()

        hostname = self._safe_execute(
            socket.gethostname,
            "Impossible de récupérer le hostname",
            ""
        )

        fqdn = ""
        if hostname:
            fqdn = self._safe_execute(
                lambda: socket.getfqdn(hostname),
                "Impossible de récupérer le FQDN",
                ""
            )

        self._end_collection()
        return SystemHostInfo(os=hostname or "", fqdn=fqdn or "")
