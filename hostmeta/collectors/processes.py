"""
Collecteur de la liste des processus

Les processus sont regroupés par (utilisateur, nom) ; chaque ligne a la forme
[utilisateur, %cpu, %mémoire, vms, rss, nom, nombre].
"""

import time
from typing import Any, Dict, List, Tuple

import psutil

from .base import BaseCollector


PROCESS_ATTRS = ['username', 'name', 'cpu_percent', 'memory_percent', 'memory_info']


class ProcessesCollector(BaseCollector):
    """
    Instantané des processus en cours d'exécution
    """

    def collect(self, hostname: str = "") -> Dict[str, Any]:
        """
        Collecte les processus de la machine

        Args:
            hostname: Nom d'hôte rattaché à l'instantané

        Returns:
            dict: {"processes": {"snaps": [[timestamp, lignes]]}, "meta": {"host": hostname}}
        """
        self._start_collection()

        rows = self._safe_execute(
            self._collect_rows,
            "Erreur récupération liste des processus",
            []
        )

        self._end_collection()
        return {
            'processes': {'snaps': [[int(time.time()), rows]]},
            'meta': {'host': hostname},
        }

    def _collect_rows(self) -> List[List[Any]]:
        groups: Dict[Tuple[str, str], List[Any]] = {}

        for process in psutil.process_iter(PROCESS_ATTRS):
            info = process.info
            user = info.get('username') or ''
            name = info.get('name') or ''
            memory = info.get('memory_info')

            row = groups.setdefault((user, name), [user, 0.0, 0.0, 0, 0, name, 0])
            row[1] += info.get('cpu_percent') or 0.0
            row[2] += info.get('memory_percent') or 0.0
            if memory is not None:
                row[3] += memory.vms
                row[4] += memory.rss
            row[6] += 1

        result = []
        for row in groups.values():
            row[1] = round(row[1], 1)
            row[2] = round(row[2], 1)
            result.append(row)

        # Plus gros consommateurs de mémoire en premier
        result.sort(key=lambda r: (-r[4], r[0], r[5]))
        return result
