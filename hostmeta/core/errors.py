"""
Exceptions de l'agent de métadonnées d'hôte

Hiérarchie :
- HostMetadataError : base commune
- InvalidPatternError : règle de filtre invalide (fatale, remontée à l'appelant)
- DeliveryError : échec d'un envoi (TransportError, RemoteRejectedError)
- RetryExhausted : toutes les tentatives d'envoi ont échoué
- SourceError : aucun nom d'hôte n'a pu être déterminé
"""

from typing import Optional


class HostMetadataError(Exception):
    """Classe de base de toutes les erreurs de l'agent"""


class InvalidPatternError(HostMetadataError):
    """Une expression régulière du filtre ne compile pas"""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Expression régulière invalide '{pattern}': {reason}")


class DeliveryError(HostMetadataError):
    """Échec d'une tentative d'envoi des métadonnées"""

    def __init__(self, endpoint: str, message: str):
        self.endpoint = endpoint
        super().__init__(message)


class TransportError(DeliveryError):
    """Erreur réseau (connexion, timeout, SSL...)"""

    def __init__(self, endpoint: str, reason: str):
        self.reason = reason
        super().__init__(endpoint, f"Erreur de transport vers {endpoint}: {reason}")


class RemoteRejectedError(DeliveryError):
    """Le serveur a répondu avec un code HTTP >= 400"""

    def __init__(self, status: int, endpoint: str, reason: str = ""):
        self.status = status
        self.reason = reason
        status_text = f"{status} {reason}".strip()
        super().__init__(
            endpoint,
            f"'{status_text}' error when sending metadata payload to {endpoint}"
        )


class RetryExhausted(HostMetadataError):
    """Nombre maximal de tentatives atteint sans succès"""

    def __init__(self, attempts: int, last_error: Optional[Exception]):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Échec après {attempts} tentative(s). Dernière erreur: {last_error}")


class SourceError(HostMetadataError):
    """Aucune source de nom d'hôte disponible"""
