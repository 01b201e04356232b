"""
Conventions sémantiques et extraction d'informations depuis les attributs

Les attributs de ressource (cloud.provider, host.id, ...) sont fournis par
l'appelant ; ce module en déduit le nom d'hôte et les informations
spécifiques AWS EC2 et Google Cloud.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from ..collectors.source import Source, SourceKind


class ResourceAttributes:
    """Clés d'attributs de ressource utilisées par l'agent"""

    CLOUD_PROVIDER = "cloud.provider"
    CLOUD_PLATFORM = "cloud.platform"
    CLOUD_ACCOUNT_ID = "cloud.account.id"
    CLOUD_AVAILABILITY_ZONE = "cloud.availability_zone"

    HOST_ID = "host.id"
    HOST_NAME = "host.name"
    HOST_TYPE = "host.type"

    AWS_ECS_TASK_ARN = "aws.ecs.task.arn"
    AWS_ECS_LAUNCHTYPE = "aws.ecs.launchtype"

    # Nom d'hôte imposé explicitement
    DATADOG_HOST_NAME = "datadog.host.name"

    # Tags EC2 : ec2.tag.<clé> = <valeur>
    EC2_TAG_PREFIX = "ec2.tag."


class CloudProvider:
    """Valeurs de cloud.provider"""

    AWS = "aws"
    GCP = "gcp"


AWS_ECS_PLATFORM = "aws_ecs"
FARGATE_LAUNCHTYPE = "fargate"

LOCAL_HOSTNAMES = frozenset([
    "0.0.0.0",
    "127.0.0.1",
    "::1",
    "localhost",
    "localhost.localdomain",
    "localhost6.localdomain6",
    "ip6-localhost",
])


@dataclass(frozen=True)
class Ec2AttributesInfo:
    """Informations EC2 déduites des attributs"""
    instance_id: str = ""
    ec2_hostname: str = ""
    ec2_tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GcpAttributesInfo:
    """Informations Google Cloud déduites des attributs"""
    gcp_tags: Tuple[str, ...] = ()
    host_aliases: Tuple[str, ...] = ()


def get_str(attrs: Mapping[str, Any], key: str) -> str:
    """Valeur d'un attribut sous forme de chaîne, "" si absent"""
    value = attrs.get(key)
    if value is None:
        return ""
    return str(value)


def cloud_provider(attrs: Mapping[str, Any]) -> Optional[str]:
    """Fournisseur cloud déclaré, None si absent"""
    if ResourceAttributes.CLOUD_PROVIDER not in attrs:
        return None
    return get_str(attrs, ResourceAttributes.CLOUD_PROVIDER)


def is_local_hostname(hostname: str) -> bool:
    return hostname.lower() in LOCAL_HOSTNAMES


def _hostname_candidate(attrs: Mapping[str, Any]) -> str:
    explicit = get_str(attrs, ResourceAttributes.DATADOG_HOST_NAME)
    if explicit:
        return explicit

    # Sur AWS et GCP, pas de repli sur l'autre attribut
    provider = cloud_provider(attrs)
    if provider == CloudProvider.AWS:
        return get_str(attrs, ResourceAttributes.HOST_ID)
    if provider == CloudProvider.GCP:
        return get_str(attrs, ResourceAttributes.HOST_NAME)

    return get_str(attrs, ResourceAttributes.HOST_ID) or get_str(attrs, ResourceAttributes.HOST_NAME)


def source_from_attributes(attrs: Mapping[str, Any]) -> Optional[Source]:
    """
    Détermine la source (tâche Fargate ou nom d'hôte) depuis les attributs

    Ordre de priorité :
    1. Tâche ECS Fargate (ARN de la tâche)
    2. datadog.host.name
    3. Nom d'hôte propre au fournisseur cloud : host.id sur AWS, host.name
       sur GCP ; pour les autres, host.id puis host.name

    Un nom local (localhost, 127.0.0.1, ...) est écarté sans repli sur les
    attributs suivants.

    Args:
        attrs: Attributs de ressource

    Returns:
        Source ou None si aucune source utilisable
    """
    platform = get_str(attrs, ResourceAttributes.CLOUD_PLATFORM)
    launch_type = get_str(attrs, ResourceAttributes.AWS_ECS_LAUNCHTYPE)
    task_arn = get_str(attrs, ResourceAttributes.AWS_ECS_TASK_ARN)
    if platform == AWS_ECS_PLATFORM and launch_type == FARGATE_LAUNCHTYPE and task_arn:
        return Source(SourceKind.AWS_ECS_FARGATE, task_arn)

    candidate = _hostname_candidate(attrs)
    if candidate and not is_local_hostname(candidate):
        return Source(SourceKind.HOSTNAME, candidate)

    return None


def ec2_host_info_from_attributes(attrs: Mapping[str, Any]) -> Ec2AttributesInfo:
    """
    Extrait les informations EC2 des attributs

    Args:
        attrs: Attributs de ressource

    Returns:
        Ec2AttributesInfo: ID d'instance, hostname EC2 et tags ec2.tag.*
    """
    prefix = ResourceAttributes.EC2_TAG_PREFIX
    tags = []
    for key, value in attrs.items():
        if key.startswith(prefix) and len(key) > len(prefix):
            tags.append(f"{key[len(prefix):]}:{'' if value is None else value}")

    return Ec2AttributesInfo(
        instance_id=get_str(attrs, ResourceAttributes.HOST_ID),
        ec2_hostname=get_str(attrs, ResourceAttributes.HOST_NAME),
        ec2_tags=tuple(tags),
    )


def gcp_host_info_from_attributes(attrs: Mapping[str, Any]) -> GcpAttributesInfo:
    """
    Extrait les tags et alias Google Cloud des attributs

    Args:
        attrs: Attributs de ressource

    Returns:
        GcpAttributesInfo: Tags GCP et alias d'hôte (<host.name>.<projet>)
    """
    tags = []
    for tag_name, key in (
        ("instance-id", ResourceAttributes.HOST_ID),
        ("project", ResourceAttributes.CLOUD_ACCOUNT_ID),
        ("zone", ResourceAttributes.CLOUD_AVAILABILITY_ZONE),
        ("instance-type", ResourceAttributes.HOST_TYPE),
    ):
        value = get_str(attrs, key)
        if value:
            tags.append(f"{tag_name}:{value}")

    aliases = []
    host_name = get_str(attrs, ResourceAttributes.HOST_NAME)
    project = get_str(attrs, ResourceAttributes.CLOUD_ACCOUNT_ID)
    if host_name and project:
        aliases.append(f"{host_name}.{project}")

    return GcpAttributesInfo(gcp_tags=tuple(tags), host_aliases=tuple(aliases))
