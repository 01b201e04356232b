"""
Modèle du document de métadonnées d'hôte

Le document est immuable : chaque étape de construction retourne une
nouvelle instance (dataclasses.replace). Une fois envoyé, il n'est plus
jamais modifié ; toute évolution future passe par une copie.
"""

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple


def _freeze(value: Any) -> Any:
    """Copie en lecture seule d'un blob opaque, à toutes les profondeurs"""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    # Inverse de _freeze, pour json.dumps
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class Meta:
    """Identité de la machine"""
    hostname: str = ""
    instance_id: str = ""
    ec2_hostname: str = ""
    socket_hostname: str = ""
    socket_fqdn: str = ""
    host_aliases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class HostTags:
    """Tags de l'hôte, par origine"""
    otel: Tuple[str, ...] = ()
    gcp: Tuple[str, ...] = ()


@dataclass(frozen=True)
class HostMetadata:
    """
    Document de métadonnées envoyé à l'intake

    payload et processes sont des blobs opaques produits par les collecteurs
    matériel et processus ; ils sont figés à toutes les profondeurs
    (mappings en lecture seule, listes converties en tuples).
    """
    internal_hostname: str = ""
    meta: Meta = field(default_factory=Meta)
    tags: HostTags = field(default_factory=HostTags)
    flavor: str = ""
    version: str = ""
    payload: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    processes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        # Figer les blobs même si l'appelant passe des dict et list ordinaires
        object.__setattr__(self, "payload", _freeze(self.payload))
        object.__setattr__(self, "processes", _freeze(self.processes))

    def as_dict(self) -> Dict[str, Any]:
        """
        Représentation au format attendu par l'intake

        Returns:
            dict: Nouveau dictionnaire, indépendant du document
        """
        host_tags: Dict[str, Any] = {}
        if self.tags.otel:
            host_tags["otel"] = list(self.tags.otel)
        if self.tags.gcp:
            host_tags["google cloud platform"] = list(self.tags.gcp)

        document = {
            "internalHostname": self.internal_hostname,
            "agent-flavor": self.flavor,
            "otel_version": self.version,
            "meta": {
                "hostname": self.meta.hostname,
                "instance-id": self.meta.instance_id,
                "ec2-hostname": self.meta.ec2_hostname,
                "socket-hostname": self.meta.socket_hostname,
                "socket-fqdn": self.meta.socket_fqdn,
                "host_aliases": list(self.meta.host_aliases),
            },
            "host-tags": host_tags,
        }

        # Le payload matériel est fusionné à la racine ("gohai": ...)
        document.update(_thaw(self.payload))
        document["processes"] = _thaw(self.processes)
        return document

    def to_json(self) -> bytes:
        """Sérialisation JSON déterministe du document"""
        return json.dumps(self.as_dict(), separators=(",", ":"), default=str).encode("utf-8")
