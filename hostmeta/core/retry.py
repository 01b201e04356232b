"""
Module de tentatives d'envoi avec backoff exponentiel

Ce module gère :
- Le nombre maximal de tentatives
- Le délai exponentiel entre deux tentatives, avec variation aléatoire
- La durée totale maximale consacrée à un envoi
"""

import random
import time
from typing import Callable, Optional, Tuple

from .config import RetrySettings
from .errors import DeliveryError, RetryExhausted
from .scrub import Scrubber


class Retrier:
    """
    Exécute une opération avec une politique de tentatives bornée

    Toute DeliveryError déclenche une nouvelle tentative ; une fois les
    tentatives épuisées, l'échec est retourné (RetryExhausted) et non levé.
    """

    def __init__(self, settings: RetrySettings, logger,
                 scrubber: Optional[Scrubber] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialise le gestionnaire de tentatives

        Args:
            settings: Politique de tentatives
            logger: Instance de AgentLogger
            scrubber: Masquage des secrets dans les messages loggés
            sleep: Fonction d'attente entre deux tentatives
        """
        self.settings = settings
        self.logger = logger.get_logger()
        self.scrubber = scrubber or Scrubber()
        self.sleep = sleep

    def backoff_delays(self):
        """
        Génère les délais successifs (secondes) entre les tentatives

        Chaque délai vaut initial_interval * multiplier^n, plafonné à
        max_interval, puis varié aléatoirement de +/- randomization_factor.
        """
        interval = self.settings.initial_interval
        while True:
            delta = self.settings.randomization_factor * interval
            yield random.uniform(interval - delta, interval + delta)
            interval = min(interval * self.settings.multiplier, self.settings.max_interval)

    def do_with_retries(self, operation: Callable[[], object],
                        description: str = "envoi") -> Tuple[int, Optional[RetryExhausted]]:
        """
        Exécute l'opération jusqu'au succès ou à l'épuisement des tentatives

        Args:
            operation: Fonction sans argument ; lève DeliveryError en cas d'échec
            description: Libellé utilisé dans les logs

        Returns:
            Tuple[int, Optional[RetryExhausted]]: (Nombre de tentatives, échec final ou None)
        """
        settings = self.settings
        max_attempts = settings.max_attempts if settings.enabled else 1
        # Sans aucune borne : une seule tentative
        if max_attempts == 0 and not settings.max_elapsed_time:
            max_attempts = 1
        start = time.monotonic()
        delays = self.backoff_delays()
        attempts = 0

        while True:
            attempts += 1
            try:
                operation()
                if attempts > 1:
                    self.logger.info(f"{description}: réussi après {attempts} tentative(s)")
                return attempts, None
            except DeliveryError as e:
                last_error = e

            message = self.scrubber.scrub(str(last_error))

            if not settings.enabled or (max_attempts and attempts >= max_attempts):
                return attempts, RetryExhausted(attempts, last_error)

            delay = next(delays)
            if settings.max_elapsed_time and time.monotonic() - start + delay > settings.max_elapsed_time:
                self.logger.debug(f"{description}: durée maximale de {settings.max_elapsed_time}s atteinte")
                return attempts, RetryExhausted(attempts, last_error)

            self.logger.warning(
                f"{description}: tentative {attempts} échouée ({message}). "
                f"Nouvelle tentative dans {delay:.1f} secondes..."
            )
            self.sleep(delay)
