"""
Construction du document de métadonnées d'hôte

Le document est assemblé en deux temps :
1. Valeurs déduites des attributs de ressource (si use_resource_metadata)
2. Complément par les sondes locales, uniquement pour les champs encore vides

Les valeurs issues des attributs sont prioritaires : une sonde ne remplace
jamais une valeur déjà connue. flavor, version, tags de configuration,
payload et processes sont toujours renseignés par l'agent lui-même.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from ..collectors.ec2 import Ec2Collector
from ..collectors.hardware import HardwareCollector
from ..collectors.processes import ProcessesCollector
from ..collectors.source import SourceKind, SourceProvider
from ..collectors.system import SystemCollector
from .attributes import (
    CloudProvider,
    cloud_provider,
    ec2_host_info_from_attributes,
    gcp_host_info_from_attributes,
    source_from_attributes,
)
from .config import BuildInfo, PushConfig
from .document import HostMetadata, HostTags, Meta
from .errors import SourceError
from .filter import FieldFilter


@dataclass(frozen=True)
class HostProbes:
    """Sondes locales consultées pour compléter le document"""
    ec2: Ec2Collector
    system: SystemCollector
    hardware: HardwareCollector
    processes: ProcessesCollector

    @classmethod
    def default(cls, logger: logging.Logger, timeout: float = 1.0) -> "HostProbes":
        """
        Crée les sondes par défaut

        Args:
            logger: Logger transmis aux collecteurs
            timeout: Timeout des requêtes vers le service de métadonnées EC2
        """
        return cls(
            ec2=Ec2Collector(logger, timeout=timeout),
            system=SystemCollector(logger),
            hardware=HardwareCollector(logger),
            processes=ProcessesCollector(logger),
        )


def metadata_from_attributes(attrs: Mapping[str, Any],
                             tag_filter: Optional[FieldFilter] = None) -> HostMetadata:
    """
    Construit un document à partir des attributs de ressource

    Args:
        attrs: Attributs de ressource (conventions sémantiques)
        tag_filter: Filtre des attributs à ajouter comme tags "clé:valeur"

    Returns:
        HostMetadata: Document partiel
    """
    internal_hostname = ""
    meta = Meta()
    tags = HostTags()

    src = source_from_attributes(attrs)
    if src is not None and src.kind == SourceKind.HOSTNAME:
        internal_hostname = src.identifier
        meta = replace(meta, hostname=src.identifier)

    # Seuls AWS et GCP alimentent le document depuis les attributs
    provider = cloud_provider(attrs)
    if provider == CloudProvider.AWS:
        ec2_info = ec2_host_info_from_attributes(attrs)
        meta = replace(meta, instance_id=ec2_info.instance_id, ec2_hostname=ec2_info.ec2_hostname)
        tags = replace(tags, otel=tags.otel + ec2_info.ec2_tags)
    elif provider == CloudProvider.GCP:
        gcp_info = gcp_host_info_from_attributes(attrs)
        meta = replace(meta, host_aliases=meta.host_aliases + gcp_info.host_aliases)
        tags = replace(tags, gcp=gcp_info.gcp_tags)

    if tag_filter is not None and len(tag_filter):
        extra = tuple(f"{key}:{value}" for key, value in tag_filter.filter_in(attrs).items())
        tags = replace(tags, otel=tags.otel + extra)

    return HostMetadata(internal_hostname=internal_hostname, meta=meta, tags=tags)


def fill_host_metadata(document: HostMetadata,
                       pcfg: PushConfig,
                       provider: SourceProvider,
                       probes: HostProbes,
                       build_info: BuildInfo,
                       logger: logging.Logger) -> HostMetadata:
    """
    Complète le document avec les informations locales

    Args:
        document: Document partiel (issu des attributs ou vide)
        pcfg: Configuration d'envoi
        provider: Fournisseur de nom d'hôte
        probes: Sondes locales
        build_info: Identité de l'agent
        logger: Logger

    Returns:
        HostMetadata: Nouveau document complet
    """
    internal_hostname = document.internal_hostname
    meta = document.meta

    # Hostname absent des attributs
    if not internal_hostname:
        try:
            src = provider.source()
        except SourceError as e:
            logger.debug(f"Hostname indisponible: {e}")
        except Exception as e:
            # Erreur inattendue du fournisseur : le champ reste vide
            logger.warning(f"Erreur du fournisseur de hostname: {e}")
        else:
            if src.kind == SourceKind.HOSTNAME:
                internal_hostname = src.identifier
                meta = replace(meta, hostname=src.identifier)

    # Données EC2 absentes des attributs
    if not meta.ec2_hostname:
        ec2_info = probes.ec2.collect()
        meta = replace(meta, ec2_hostname=ec2_info.ec2_hostname, instance_id=ec2_info.instance_id)

    # Données système absentes des attributs
    if not meta.socket_hostname:
        system_info = probes.system.collect()
        meta = replace(meta, socket_hostname=system_info.os, socket_fqdn=system_info.fqdn)

    # Toujours renseignés ici : ne proviennent pas des conventions sémantiques
    return replace(
        document,
        internal_hostname=internal_hostname,
        meta=meta,
        tags=replace(document.tags, otel=document.tags.otel + tuple(pcfg.config_tags)),
        flavor=build_info.command,
        version=build_info.version,
        payload=probes.hardware.collect(),
        processes=probes.processes.collect(meta.hostname),
    )


def build_host_metadata(attrs: Mapping[str, Any],
                        pcfg: PushConfig,
                        provider: SourceProvider,
                        probes: HostProbes,
                        build_info: BuildInfo,
                        logger: logging.Logger,
                        tag_filter: Optional[FieldFilter] = None) -> HostMetadata:
    """
    Construit le document complet de métadonnées d'hôte

    Args:
        attrs: Attributs de ressource
        pcfg: Configuration d'envoi
        provider: Fournisseur de nom d'hôte
        probes: Sondes locales
        build_info: Identité de l'agent
        logger: Logger
        tag_filter: Filtre des attributs à ajouter comme tags

    Returns:
        HostMetadata: Document immuable
    """
    if pcfg.use_resource_metadata:
        document = metadata_from_attributes(attrs, tag_filter)
    else:
        document = HostMetadata()

    return fill_host_metadata(document, pcfg, provider, probes, build_info, logger)
