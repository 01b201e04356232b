"""
Module de planification de l'envoi des métadonnées d'hôte

Ce module gère :
- La construction unique du document au démarrage
- Un premier envoi immédiat, sans attendre un intervalle complet
- Le renvoi du même document à intervalle fixe (30 minutes par défaut)
- L'arrêt coopératif via un threading.Event
"""

import threading
from datetime import datetime
from typing import Any, Mapping, Optional

import schedule

from .config import BuildInfo, PushConfig
from .document import HostMetadata
from .filter import FieldFilter
from .metadata import HostProbes, build_host_metadata
from .retry import Retrier
from .scrub import Scrubber
from .sender import MetadataSender
from ..collectors.source import SourceProvider


class HostMetadataPusher:
    """
    Envoi périodique des métadonnées d'hôte

    Le document est construit une seule fois puis renvoyé à l'identique à
    chaque intervalle. Le timer est porté par un schedule.Scheduler propre
    à l'instance (et non par le planificateur global du module schedule).
    """

    def __init__(self, pcfg: PushConfig, build_info: BuildInfo, logger,
                 provider: SourceProvider, attrs: Mapping[str, Any],
                 probes: Optional[HostProbes] = None,
                 sender: Optional[MetadataSender] = None,
                 retrier: Optional[Retrier] = None,
                 jobs: Optional[schedule.Scheduler] = None):
        """
        Initialise le planificateur d'envoi

        Args:
            pcfg: Configuration d'envoi
            build_info: Identité de l'agent
            logger: Instance de AgentLogger
            provider: Fournisseur de nom d'hôte
            attrs: Attributs de ressource (lecture seule)
            probes: Sondes locales (par défaut HostProbes.default)
            sender: Client d'envoi (par défaut MetadataSender)
            retrier: Gestionnaire de tentatives (par défaut selon pcfg.retry_settings)
            jobs: Planificateur schedule dédié

        Raises:
            InvalidPatternError: Si une expression de tag_attributes est invalide
            ValueError: Si l'intervalle d'envoi n'est pas strictement positif
        """
        if pcfg.interval <= 0:
            raise ValueError(f"Intervalle d'envoi invalide: {pcfg.interval} (doit être > 0)")

        self.pcfg = pcfg
        self.build_info = build_info
        self.logger = logger.get_logger()
        self.provider = provider
        self.attrs = dict(attrs)

        self.tag_filter = FieldFilter(pcfg.tag_attributes)
        self.scrubber = Scrubber([pcfg.api_key])
        self.probes = probes or HostProbes.default(self.logger)
        self.sender = sender or MetadataSender(pcfg, build_info, logger)
        self.retrier = retrier or Retrier(pcfg.retry_settings, logger, self.scrubber)
        self.jobs = jobs or schedule.Scheduler()

        # État
        self.document: Optional[HostMetadata] = None
        self.push_count = 0
        self.last_push = None
        self.stop_event = threading.Event()
        self.pusher_thread = None

        self.logger.info("HostMetadataPusher initialisé")

    def build_document(self) -> HostMetadata:
        """
        Construit le document de métadonnées

        Returns:
            HostMetadata: Document immuable
        """
        self.logger.info("Construction des métadonnées d'hôte...")
        return build_host_metadata(
            self.attrs,
            self.pcfg,
            self.provider,
            self.probes,
            self.build_info,
            self.logger,
            self.tag_filter
        )

    def push_with_retry(self, document: HostMetadata) -> bool:
        """
        Envoie le document avec la politique de tentatives

        Ne lève jamais d'exception liée à l'envoi : un échec définitif est
        loggé et le planificateur continue.

        Args:
            document: Document à envoyer

        Returns:
            bool: True si l'envoi a abouti (ou a été ignoré faute de hostname)
        """
        self.logger.debug(f"Envoi des métadonnées d'hôte: {document.as_dict()}")
        self.push_count += 1
        self.last_push = datetime.now()

        _, error = self.retrier.do_with_retries(
            lambda: self.sender.push(document),
            "Envoi des métadonnées d'hôte"
        )

        if error is not None:
            self.logger.warning(f"Échec de l'envoi des métadonnées d'hôte: {self.scrubber.scrub(str(error))}")
            return False

        self.logger.info("Métadonnées d'hôte envoyées")
        return True

    def _safe_push(self, document: HostMetadata):
        try:
            self.push_with_retry(document)
        except Exception:
            self.logger.exception("Erreur inattendue lors de l'envoi des métadonnées")

    def _next_wait(self) -> float:
        idle = self.jobs.idle_seconds
        if idle is None:
            return float(self.pcfg.interval)
        return max(idle, 0.0)

    def run(self, stop_event: threading.Event):
        """
        Boucle principale : construction, envoi immédiat puis envois périodiques

        Args:
            stop_event: Signal d'arrêt ; la boucle se termine dès qu'il est levé
        """
        try:
            self.document = self.build_document()
        except Exception:
            self.logger.exception("Erreur lors de la construction des métadonnées d'hôte")
            return

        # Premier envoi au démarrage
        self._safe_push(self.document)

        job = self.jobs.every(self.pcfg.interval).seconds.do(self._safe_push, self.document)
        self.logger.debug(f"Envoi planifié toutes les {self.pcfg.interval} secondes")

        try:
            while not stop_event.wait(timeout=self._next_wait()):
                try:
                    self.jobs.run_pending()
                except Exception:
                    self.logger.exception("Erreur dans la boucle d'envoi des métadonnées")
        finally:
            # Libérer le timer
            self.jobs.cancel_job(job)
            self.logger.debug("Arrêt de la routine des métadonnées d'hôte")

    def start(self, stop_event: Optional[threading.Event] = None):
        """
        Démarre la boucle d'envoi dans un thread dédié

        Args:
            stop_event: Signal d'arrêt externe (optionnel)
        """
        if self.pusher_thread and self.pusher_thread.is_alive():
            self.logger.warning("HostMetadataPusher déjà en cours d'exécution")
            return

        if stop_event is not None:
            self.stop_event = stop_event
        else:
            self.stop_event.clear()

        self.pusher_thread = threading.Thread(
            target=self.run,
            args=(self.stop_event,),
            name="HostMetadataPusher",
            daemon=True
        )
        self.pusher_thread.start()
        self.logger.info(f"HostMetadataPusher démarré (intervalle: {self.pcfg.interval}s)")

    def stop(self, timeout: float = 5.0):
        """
        Arrête la boucle d'envoi

        Un envoi en cours n'est pas interrompu ; il est borné par le timeout HTTP.
        """
        if not self.pusher_thread:
            self.logger.warning("HostMetadataPusher pas en cours d'exécution")
            return

        self.logger.info("Arrêt du HostMetadataPusher...")
        self.stop_event.set()

        if self.pusher_thread.is_alive():
            self.pusher_thread.join(timeout=timeout)

        self.pusher_thread = None
        self.logger.info("HostMetadataPusher arrêté")

    def get_status(self) -> dict:
        """
        Retourne le statut actuel du planificateur

        Returns:
            dict: Informations sur l'état de l'envoi périodique
        """
        next_run = self.jobs.next_run
        return {
            'is_running': bool(self.pusher_thread and self.pusher_thread.is_alive()),
            'interval_seconds': self.pcfg.interval,
            'push_count': self.push_count,
            'last_push': self.last_push.isoformat() if self.last_push else None,
            'next_push': next_run.isoformat() if next_run else None,
            'hostname': self.document.meta.hostname if self.document else None,
            'sender': self.sender.get_stats(),
        }
