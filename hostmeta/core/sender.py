"""
Module de communication avec l'intake pour l'agent de métadonnées

Ce module gère :
- L'envoi du document de métadonnées à l'intake
- L'authentification par clé d'API
- La classification des erreurs (transport ou rejet par le serveur)
"""

from datetime import datetime
from typing import Any, Dict

import requests
import urllib3

from .config import BuildInfo, PushConfig
from .document import HostMetadata
from .errors import RemoteRejectedError, TransportError

# Désactiver les warnings SSL si la vérification est désactivée
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

INTAKE_PATH = "/intake"
DRAIN_CHUNK_SIZE = 8192


class MetadataSender:
    """
    Envoi d'un document de métadonnées à l'intake

    Une seule tentative par appel à push() ; les tentatives multiples
    sont gérées par le Retrier.
    """

    def __init__(self, pcfg: PushConfig, build_info: BuildInfo, logger):
        """
        Initialise le sender avec la configuration

        Args:
            pcfg: Configuration d'envoi
            build_info: Identité de l'agent (User-Agent)
            logger: Instance de AgentLogger
        """
        self.pcfg = pcfg
        self.build_info = build_info
        self.logger = logger.get_logger()

        self.endpoint = pcfg.metrics_endpoint.rstrip('/') + INTAKE_PATH

        # Statistiques de communication
        self.last_successful_send = None
        self.send_attempts = 0
        self.send_failures = 0

    def _headers(self) -> Dict[str, str]:
        return {
            'DD-Api-Key': self.pcfg.api_key,
            'User-Agent': f"{self.build_info.command}/{self.build_info.version}",
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }

    def push(self, document: HostMetadata) -> bool:
        """
        Envoie le document à l'intake (une tentative)

        Args:
            document: Document de métadonnées

        Returns:
            bool: True si envoyé, False si ignoré (hostname vide)

        Raises:
            TransportError: Erreur réseau
            RemoteRejectedError: Réponse HTTP >= 400
        """
        if not document.meta.hostname:
            # Sans hostname, le document est inutile pour l'intake
            self.logger.debug("Métadonnées d'hôte ignorées : hostname vide")
            return False

        body = document.to_json()
        self.send_attempts += 1
        self.logger.debug(f"Taille des données: {len(body)} bytes")

        try:
            with requests.post(
                url=self.endpoint,
                data=body,
                headers=self._headers(),
                timeout=self.pcfg.timeout,
                verify=not self.pcfg.insecure_skip_verify,
                stream=True
            ) as response:
                # Vider le corps de la réponse avant de libérer la connexion
                for _ in response.iter_content(chunk_size=DRAIN_CHUNK_SIZE):
                    pass
                status_code = response.status_code
                reason = response.reason or ""

        except requests.exceptions.RequestException as e:
            self.send_failures += 1
            raise TransportError(self.endpoint, str(e)) from e

        if status_code >= 400:
            self.send_failures += 1
            raise RemoteRejectedError(status_code, self.endpoint, reason)

        self.last_successful_send = datetime.now()
        return True

    def get_stats(self) -> Dict[str, Any]:
        """
        Retourne les statistiques de communication

        Returns:
            dict: Statistiques d'envoi
        """
        return {
            'last_successful_send': self.last_successful_send.isoformat() if self.last_successful_send else None,
            'total_attempts': self.send_attempts,
            'total_failures': self.send_failures,
            'success_rate': ((self.send_attempts - self.send_failures) / self.send_attempts * 100) if self.send_attempts > 0 else 0,
            'endpoint': self.endpoint
        }
