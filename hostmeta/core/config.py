"""
Module de configuration pour l'agent de métadonnées d'hôte

Ce module gère la configuration de l'agent, incluant :
- Lecture des fichiers de configuration (INI)
- Validation des paramètres
- Valeurs par défaut
- Conversion en objets de configuration immuables (PushConfig, RetrySettings)
"""

import os
import re
import sys
import configparser
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .. import __version__


DEFAULT_INTERVAL_SECONDS = 30 * 60


@dataclass(frozen=True)
class RetrySettings:
    """Politique de tentatives d'envoi"""
    enabled: bool = True
    max_attempts: int = 5
    initial_interval: float = 5.0
    randomization_factor: float = 0.5
    multiplier: float = 1.5
    max_interval: float = 30.0
    # 0 = pas de limite de durée totale
    max_elapsed_time: float = 300.0


@dataclass(frozen=True)
class PushConfig:
    """Configuration de l'envoi des métadonnées"""
    metrics_endpoint: str = "https://api.datadoghq.com"
    api_key: str = field(default="", repr=False)
    timeout: float = 15.0
    insecure_skip_verify: bool = False
    use_resource_metadata: bool = True
    config_tags: Tuple[str, ...] = ()
    retry_settings: RetrySettings = field(default_factory=RetrySettings)
    hostname: str = ""
    tag_attributes: Tuple[str, ...] = ()
    interval: int = DEFAULT_INTERVAL_SECONDS


@dataclass(frozen=True)
class BuildInfo:
    """Identité de l'agent qui produit le document"""
    command: str = "watchman-host-metadata"
    version: str = __version__


def _platform_path(windows_env: str, windows_default: str, windows_parts, posix_path: str) -> str:
    if sys.platform == "win32":
        return os.path.join(os.environ.get(windows_env, windows_default), *windows_parts)
    return posix_path


def default_config_path() -> str:
    """Emplacement du fichier INI quand --config n'est pas fourni"""
    return _platform_path(
        "PROGRAMFILES", "C:\\Program Files",
        ("Watchman Host Metadata", "config", "config.ini"),
        "/etc/watchman-host-metadata/config.ini"
    )


def default_log_path() -> str:
    return _platform_path(
        "PROGRAMDATA", "C:\\ProgramData",
        ("WatchmanHostMetadata", "logs", "agent.log"),
        "/var/log/watchman-host-metadata/agent.log"
    )


def default_sections() -> Dict[str, Dict[str, str]]:
    """
    Valeurs par défaut, section par section

    Elles reprennent celles de PushConfig et RetrySettings ; un fichier
    partiel ne remplace que les clés qu'il déclare.
    """
    push = PushConfig()
    retry = push.retry_settings
    return {
        'intake': {
            'url': push.metrics_endpoint,
            'api_key': '',
            'timeout': str(int(push.timeout)),
            'insecure_skip_verify': 'false',
        },
        'host_metadata': {
            'use_resource_metadata': 'true',
            'hostname': '',
            'tags': '',
            'tag_attributes': '',
            'interval': str(DEFAULT_INTERVAL_SECONDS),
        },
        'retry': {
            'enabled': 'true',
            'max_attempts': str(retry.max_attempts),
            'initial_interval': str(retry.initial_interval),
            'randomization_factor': str(retry.randomization_factor),
            'multiplier': str(retry.multiplier),
            'max_interval': str(retry.max_interval),
            'max_elapsed_time': str(retry.max_elapsed_time),
        },
        # clé = valeur, libres
        'resource_attributes': {},
        'agent': {
            'log_level': 'INFO',
        },
        'logging': {
            'log_file': default_log_path(),
            'max_log_size': '10485760',  # 10MB
            'backup_count': '5',
        },
    }


class AgentConfig:
    """
    Configuration INI de l'agent de métadonnées

    Sections : [intake], [host_metadata], [retry], [resource_attributes],
    [agent] et [logging]. Les valeurs absentes du fichier gardent leur
    valeur par défaut.
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Args:
            config_file: Fichier INI (par défaut selon la plateforme)
        """
        self.config = configparser.ConfigParser()
        # Conserver la casse des clés d'attributs de ressource
        self.config.optionxform = str
        self.config_file = config_file or default_config_path()

        self.config.read_dict(default_sections())
        self._load_config()

    def _load_config(self):
        # Un fichier absent ou illisible n'est pas fatal : les défauts restent actifs
        try:
            if not os.path.exists(self.config_file):
                print(f"Fichier de configuration non trouvé: {self.config_file}")
                print("Utilisation des valeurs par défaut")
                return
            self.config.read(self.config_file, encoding='utf-8')
            print(f"Configuration chargée depuis: {self.config_file}")

        except (configparser.Error, OSError) as e:
            print(f"Erreur lors du chargement de la configuration: {e}")
            print("Utilisation des valeurs par défaut")

    def get(self, section: str, option: str, fallback: Any = None) -> str:
        return self.config.get(section, option, fallback=fallback)

    def getboolean(self, section: str, option: str, fallback: bool = False) -> bool:
        return self.config.getboolean(section, option, fallback=fallback)

    def getint(self, section: str, option: str, fallback: int = 0) -> int:
        return self.config.getint(section, option, fallback=fallback)

    def getfloat(self, section: str, option: str, fallback: float = 0.0) -> float:
        return self.config.getfloat(section, option, fallback=fallback)

    def getlist(self, section: str, option: str, separators: str = ",\n") -> List[str]:
        """
        Valeur découpée en liste

        Args:
            section: Nom de la section
            option: Nom de l'option
            separators: Caractères séparant les éléments

        Returns:
            list: Éléments non vides, dans l'ordre du fichier
        """
        raw = self.get(section, option, '') or ''
        items = re.split(f"[{re.escape(separators)}]", raw)
        return [item.strip() for item in items if item.strip()]

    def set(self, section: str, option: str, value: Any):
        """Modifie une valeur en mémoire (voir save())"""
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, option, str(value))

    def save(self):
        """Écrit la configuration courante dans config_file"""
        try:
            parent = os.path.dirname(self.config_file)
            if parent:
                os.makedirs(parent, exist_ok=True)

            with open(self.config_file, 'w', encoding='utf-8') as f:
                self.config.write(f)

            print(f"Configuration sauvegardée dans: {self.config_file}")

        except OSError as e:
            print(f"Erreur lors de la sauvegarde de la configuration: {e}")

    def get_retry_settings(self) -> RetrySettings:
        """Politique de tentatives de la section [retry]"""
        defaults = RetrySettings()
        return RetrySettings(
            enabled=self.getboolean('retry', 'enabled', defaults.enabled),
            max_attempts=self.getint('retry', 'max_attempts', defaults.max_attempts),
            initial_interval=self.getfloat('retry', 'initial_interval', defaults.initial_interval),
            randomization_factor=self.getfloat('retry', 'randomization_factor', defaults.randomization_factor),
            multiplier=self.getfloat('retry', 'multiplier', defaults.multiplier),
            max_interval=self.getfloat('retry', 'max_interval', defaults.max_interval),
            max_elapsed_time=self.getfloat('retry', 'max_elapsed_time', defaults.max_elapsed_time),
        )

    def get_push_config(self) -> PushConfig:
        """
        Configuration d'envoi immuable

        Returns:
            PushConfig: Sections [intake], [host_metadata] et [retry]
        """
        return PushConfig(
            metrics_endpoint=self.get('intake', 'url', PushConfig.metrics_endpoint).rstrip('/'),
            api_key=self.get('intake', 'api_key', ''),
            timeout=self.getfloat('intake', 'timeout', PushConfig.timeout),
            insecure_skip_verify=self.getboolean('intake', 'insecure_skip_verify', False),
            use_resource_metadata=self.getboolean('host_metadata', 'use_resource_metadata', True),
            config_tags=tuple(self.getlist('host_metadata', 'tags')),
            retry_settings=self.get_retry_settings(),
            hostname=self.get('host_metadata', 'hostname', ''),
            # Une expression par ligne : la virgule est un caractère regex valide
            tag_attributes=tuple(self.getlist('host_metadata', 'tag_attributes', separators="\n")),
            interval=self.getint('host_metadata', 'interval', DEFAULT_INTERVAL_SECONDS),
        )

    def get_resource_attributes(self) -> Dict[str, Union[str, int, float, bool]]:
        """
        Attributs de ressource de la section [resource_attributes]

        Les valeurs sont converties : true/false en booléen, nombres en int/float.

        Returns:
            dict: Attributs de ressource
        """
        if not self.config.has_section('resource_attributes'):
            return {}

        return {
            key: _coerce_attribute(value)
            for key, value in self.config.items('resource_attributes')
        }

    def validate(self) -> bool:
        """
        Vérifie la cohérence de la configuration ; les erreurs sont affichées

        Returns:
            bool: True si la configuration est utilisable
        """
        errors = []

        url = self.get('intake', 'url')
        if not url or not url.startswith(('http://', 'https://')):
            errors.append("URL de l'intake invalide")

        if not self.get('intake', 'api_key'):
            errors.append("Clé d'API manquante")

        if self.get('agent', 'log_level') not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append("Niveau de log invalide")

        try:
            if self.getint('host_metadata', 'interval') <= 0:
                errors.append("Intervalle d'envoi invalide (doit être > 0)")

            retry = self.get_retry_settings()
            if retry.max_attempts < 0 or retry.max_elapsed_time < 0:
                errors.append("Politique de tentatives invalide (valeurs négatives)")
            elif retry.enabled and retry.max_attempts == 0 and retry.max_elapsed_time == 0:
                errors.append("Politique de tentatives non bornée (max_attempts et max_elapsed_time à 0)")
            if retry.multiplier < 1 or not 0 <= retry.randomization_factor <= 1:
                errors.append("Paramètres de backoff invalides")
        except ValueError as e:
            errors.append(f"Valeur numérique invalide: {e}")

        for error in errors:
            print(f"Erreur de configuration: {error}")
        return not errors


def _coerce_attribute(value: str) -> Union[str, int, float, bool]:
    lowered = value.strip().lower()
    if lowered in ('true', 'false'):
        return lowered == 'true'
    # "nan", "infinity"... restent des chaînes
    if not any(c.isdigit() for c in lowered):
        return value
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def create_default_config(config_path: str) -> AgentConfig:
    """
    Écrit un fichier INI contenant les valeurs par défaut

    Args:
        config_path: Chemin du fichier à créer

    Returns:
        AgentConfig: Configuration correspondante
    """
    config = AgentConfig(config_path)
    config.save()
    return config
