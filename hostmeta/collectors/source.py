"""
Fournisseurs de source (nom d'hôte) pour l'agent de métadonnées

Chaque fournisseur expose une seule méthode source() qui retourne la source
identifiant la machine, ou lève SourceError s'il ne peut pas la déterminer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..core.errors import SourceError
from .system import SystemCollector


class SourceKind(Enum):
    """Types de source supportés"""
    HOSTNAME = "host"
    AWS_ECS_FARGATE = "task_arn"


@dataclass(frozen=True)
class Source:
    """Source identifiant la télémétrie : type + identifiant"""
    kind: SourceKind
    identifier: str


class SourceProvider(ABC):
    """Interface des fournisseurs de source"""

    @abstractmethod
    def source(self) -> Source:
        """
        Retourne la source de la machine courante

        Raises:
            SourceError: Si la source ne peut pas être déterminée
        """


class ConfigSourceProvider(SourceProvider):
    """Nom d'hôte fixé dans la configuration"""

    def __init__(self, hostname: str):
        self.hostname = (hostname or "").strip()

    def source(self) -> Source:
        if not self.hostname:
            raise SourceError("Aucun hostname configuré")
        return Source(SourceKind.HOSTNAME, self.hostname)


class SystemSourceProvider(SourceProvider):
    """
    Nom d'hôte déterminé par le système

    Le FQDN est préféré s'il est qualifié (contient un point), sinon le nom
    d'hôte du système d'exploitation est utilisé.
    """

    def __init__(self, collector: SystemCollector):
        self.collector = collector

    def source(self) -> Source:
        info = self.collector.collect()

        if info.fqdn and "." in info.fqdn:
            return Source(SourceKind.HOSTNAME, info.fqdn)
        if info.os:
            return Source(SourceKind.HOSTNAME, info.os)

        raise SourceError("Impossible de déterminer le hostname du système")


class ChainSourceProvider(SourceProvider):
    """Interroge plusieurs fournisseurs dans l'ordre ; le premier qui répond gagne"""

    def __init__(self, providers: List[SourceProvider], logger=None):
        self.providers = list(providers)
        self.logger = logger

    def source(self) -> Source:
        last_error: Optional[SourceError] = None

        for provider in self.providers:
            try:
                return provider.source()
            except SourceError as e:
                last_error = e
                if self.logger:
                    self.logger.debug(f"{provider.__class__.__name__}: {e}")

        raise SourceError(f"Aucune source disponible (dernière erreur: {last_error})")
