"""
Watchman Host Metadata - Envoi périodique des métadonnées d'hôte

Ce package assemble une description de la machine (hostname, identité cloud,
tags, informations matériel et processus) à partir des attributs de ressource
et de sondes locales, puis l'envoie régulièrement à un intake HTTP.

Author: Watchman Agent Client Team
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Watchman Agent Client Team"

# Imports principaux pour faciliter l'utilisation
from .core.config import AgentConfig, BuildInfo, PushConfig, RetrySettings
from .core.document import HostMetadata
from .core.filter import FieldFilter
from .core.logger import AgentLogger
from .core.scheduler import HostMetadataPusher

__all__ = [
    'AgentConfig',
    'AgentLogger',
    'BuildInfo',
    'FieldFilter',
    'HostMetadata',
    'HostMetadataPusher',
    'PushConfig',
    'RetrySettings',
]
