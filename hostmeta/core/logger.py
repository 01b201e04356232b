"""
Logging de l'agent de métadonnées d'hôte

Un logger nommé unique, configuré une seule fois par processus :
fichier avec rotation et sortie console. Les composants reçoivent
l'AgentLogger et appellent get_logger().
"""

import os
import sys
import logging
import logging.handlers
from dataclasses import dataclass

from .scrub import Scrubber


LOGGER_NAME = 'WatchmanHostMetadata'

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
CONSOLE_FORMAT = '%(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


@dataclass(frozen=True)
class LogSettings:
    """Paramètres de logging lus dans les sections [agent] et [logging]"""
    level: str = 'INFO'
    log_file: str = ''
    max_bytes: int = 10485760  # 10MB
    backup_count: int = 5

    @classmethod
    def from_config(cls, config) -> "LogSettings":
        if config is None:
            return cls(log_file=_fallback_log_file())
        return cls(
            level=config.get('agent', 'log_level', cls.level),
            log_file=config.get('logging', 'log_file') or _fallback_log_file(),
            max_bytes=config.getint('logging', 'max_log_size', cls.max_bytes),
            backup_count=config.getint('logging', 'backup_count', cls.backup_count),
        )


def _fallback_log_file() -> str:
    # Sans configuration : répertoire temporaire de la plateforme
    if sys.platform == "win32":
        return os.path.join(os.environ.get("TEMP", "C:\\temp"), "watchman-host-metadata.log")
    return "/tmp/watchman-host-metadata.log"


class AgentLogger:
    """
    Point d'accès au logger de l'agent

    Si le logger a déjà des handlers (second AgentLogger dans le même
    processus), la configuration existante est conservée.
    """

    def __init__(self, config=None):
        """
        Args:
            config: Instance de AgentConfig (optionnelle)
        """
        self.config = config
        self.settings = LogSettings.from_config(config)
        self.logger = logging.getLogger(LOGGER_NAME)

        if not self.logger.handlers:
            self._configure()

    def _configure(self):
        level = getattr(logging, self.settings.level.upper(), logging.INFO)
        self.logger.setLevel(level)

        file_handler = self._file_handler(level)
        if file_handler is not None:
            self.logger.addHandler(file_handler)
        self.logger.addHandler(self._console_handler(level))

        self.logger.info("Système de logging initialisé")
        self.logger.info(f"Niveau de log: {self.settings.level} - Fichier: {self.settings.log_file}")

    def _file_handler(self, level: int):
        """
        Handler fichier avec rotation

        Returns:
            RotatingFileHandler ou None si le fichier n'est pas accessible
        """
        try:
            log_dir = os.path.dirname(self.settings.log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            handler = logging.handlers.RotatingFileHandler(
                filename=self.settings.log_file,
                maxBytes=self.settings.max_bytes,
                backupCount=self.settings.backup_count,
                encoding='utf-8'
            )
        except OSError as e:
            print(f"Erreur lors de la configuration du logging fichier: {e}")
            return None

        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
        return handler

    def _console_handler(self, level: int) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
        return handler

    def get_logger(self) -> logging.Logger:
        """Retourne le logger configuré"""
        return self.logger

    def log_config_info(self, config):
        """
        Récapitulatif de la configuration effective, clé d'API masquée

        Args:
            config: Instance de AgentConfig
        """
        pcfg = config.get_push_config()
        api_key = Scrubber([pcfg.api_key]).scrub(pcfg.api_key) if pcfg.api_key else 'Non configurée'

        for line in (
            "=== Configuration de l'agent ===",
            f"Intake.url: {pcfg.metrics_endpoint}",
            f"Intake.api_key: {api_key}",
            f"Intake.timeout: {pcfg.timeout}",
            f"Intake.insecure_skip_verify: {pcfg.insecure_skip_verify}",
            f"HostMetadata.use_resource_metadata: {pcfg.use_resource_metadata}",
            f"HostMetadata.tags: {list(pcfg.config_tags)}",
            f"HostMetadata.tag_attributes: {list(pcfg.tag_attributes)}",
            f"HostMetadata.interval: {pcfg.interval}s",
            f"Retry: {pcfg.retry_settings}",
            "=== Fin configuration ===",
        ):
            self.logger.info(line)
