"""
Base commune des sondes locales (EC2, système, matériel, processus)

Une sonde ne lève jamais d'exception vers le constructeur du document :
toute valeur introuvable reste vide dans le résultat et l'erreur est
conservée dans collection_errors.
"""

import re
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional


class BaseCollector(ABC):
    """
    Sonde locale

    Les sous-classes implémentent collect() et encadrent leur travail par
    _start_collection() / _end_collection() pour le suivi de durée.
    """

    def __init__(self, logger):
        """
        Args:
            logger: Instance de logging.Logger
        """
        self.logger = logger

        self.collector_name = self.__class__.__name__
        self.collection_start_time: Optional[float] = None
        self.collection_errors: List[str] = []
        self.last_collection_duration = 0.0

    @abstractmethod
    def collect(self, *args, **kwargs) -> Any:
        """Retourne un enregistrement immuable ou un blob sérialisable"""

    def _start_collection(self):
        self.collection_start_time = time.time()
        self.collection_errors = []
        self.logger.debug(f"Sonde {self.collector_name}: début")

    def _end_collection(self) -> float:
        """
        Clôt la collecte en cours

        Returns:
            float: Durée en secondes (0.0 si aucune collecte démarrée)
        """
        if not self.collection_start_time:
            return 0.0

        self.last_collection_duration = time.time() - self.collection_start_time
        self.collection_start_time = None

        if self.collection_errors:
            self.logger.warning(
                f"Sonde {self.collector_name}: {len(self.collection_errors)} valeur(s) indisponible(s)"
            )
        self.logger.debug(f"Sonde {self.collector_name}: terminée en {self.last_collection_duration:.2f}s")
        return self.last_collection_duration

    def _safe_execute(self, func: Callable[[], Any], error_message: str = "Valeur indisponible",
                      default_value: Any = None) -> Any:
        """
        Appelle func() ; en cas d'erreur, la note et retourne default_value

        Args:
            func: Fonction sans argument
            error_message: Préfixe du message noté
            default_value: Valeur retournée en cas d'erreur
        """
        try:
            return func()
        except Exception as e:
            self.collection_errors.append(f"{error_message}: {e}")
            self.logger.warning(f"{self.collector_name}: {error_message}: {e}")
            return default_value

    def _clean_string(self, value: str) -> str:
        """Supprime les caractères non imprimables et normalise les espaces"""
        if not value:
            return ""
        printable = ''.join(char for char in str(value) if char.isprintable())
        return re.sub(r'\s+', ' ', printable).strip()

    def _read_file(self, file_path: str) -> Optional[str]:
        """Contenu d'un fichier texte, None s'il est absent ou illisible"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return f.read().strip()
        except FileNotFoundError:
            self.logger.debug(f"Fichier non trouvé: {file_path}")
        except OSError as e:
            self.logger.warning(f"Erreur lecture fichier {file_path}: {e}")
        return None
