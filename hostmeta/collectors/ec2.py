"""
Sonde AWS EC2 via le service de métadonnées d'instance (IMDS)

Le jeton IMDSv2 est demandé en premier ; s'il n'est pas disponible, les
requêtes sont faites sans jeton (IMDSv1). Hors d'EC2, la sonde retourne un
résultat vide après un court timeout.
"""

from dataclasses import dataclass
from typing import Dict, Optional

import requests

from .base import BaseCollector


METADATA_URL = "http://169.254.169.254/latest"
TOKEN_URL = f"{METADATA_URL}/api/token"
TOKEN_TTL_SECONDS = "21600"


@dataclass(frozen=True)
class Ec2HostInfo:
    """Résultat de la sonde EC2 ("" si inconnu)"""
    instance_id: str = ""
    ec2_hostname: str = ""


class Ec2Collector(BaseCollector):
    """
    Interroge l'IMDS pour l'ID d'instance et le hostname EC2
    """

    def __init__(self, logger, timeout: float = 1.0):
        """
        Args:
            logger: Instance de logging.Logger
            timeout: Timeout de chaque requête IMDS (secondes)
        """
        super().__init__(logger)
        self.timeout = timeout

    def _get_token(self) -> Optional[str]:
        try:
            response = requests.put(
                TOKEN_URL,
                headers={'X-aws-ec2-metadata-token-ttl-seconds': TOKEN_TTL_SECONDS},
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            self.logger.debug(f"Jeton IMDSv2 indisponible: {e}")
            return None

        with response:
            if response.status_code == 200:
                return response.text.strip()

        self.logger.debug(f"Jeton IMDSv2 refusé (HTTP {response.status_code})")
        return None

    def _get_metadata(self, path: str, token: Optional[str]) -> str:
        headers: Dict[str, str] = {}
        if token:
            headers['X-aws-ec2-metadata-token'] = token

        try:
            response = requests.get(
                f"{METADATA_URL}/meta-data/{path}",
                headers=headers,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            self.logger.debug(f"Métadonnée EC2 '{path}' indisponible: {e}")
            return ""

        with response:
            if response.status_code == 200:
                return response.text.strip()

        self.logger.debug(f"Métadonnée EC2 '{path}': HTTP {response.status_code}")
        return ""

    def collect(self) -> Ec2HostInfo:
        self._start_collection()

        token = self._get_token()
        instance_id = self._get_metadata("instance-id", token)

        # Pas d'ID d'instance : on n'est pas sur EC2, inutile d'insister
        ec2_hostname = ""
        if instance_id:
            ec2_hostname = self._get_metadata("hostname", token)
        else:
            self.logger.debug("Instance EC2 non détectée")

        self._end_collection()
        return Ec2HostInfo(instance_id=instance_id, ec2_hostname=ec2_hostname)
