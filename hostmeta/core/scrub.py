"""
Masquage des secrets avant écriture dans les logs

Les messages d'erreur réseau peuvent contenir l'URL complète ou les en-têtes
de la requête ; les clés d'API y sont masquées en ne gardant que les
5 derniers caractères.
"""

import re
from typing import List, Optional, Tuple


DEFAULT_RULES: List[Tuple[str, str]] = [
    # api_key=... dans une URL ou un en-tête
    (r'(api_?key["\']?\s*[=:]\s*["\']?)[^\s&"\',]+', r'\1********'),
    # Clé d'API (32 caractères hexadécimaux)
    (r'\b[a-fA-F0-9]{27}([a-fA-F0-9]{5})\b', r'***************************\1'),
    # Clé d'application (40 caractères hexadécimaux)
    (r'\b[a-fA-F0-9]{35}([a-fA-F0-9]{5})\b', r'***********************************\1'),
]


class Scrubber:
    """
    Remplace les secrets connus dans un texte

    Les règles sont appliquées dans l'ordre ; des secrets supplémentaires
    (ex: la clé d'API configurée) peuvent être masqués littéralement.
    """

    def __init__(self, secrets: Optional[List[str]] = None):
        self.rules = [(re.compile(pattern, re.IGNORECASE), repl) for pattern, repl in DEFAULT_RULES]
        self.secrets = [s for s in (secrets or []) if s]

    def scrub(self, text: str) -> str:
        """
        Masque les secrets d'un message

        Args:
            text: Message brut

        Returns:
            str: Message nettoyé
        """
        if not text:
            return text

        for secret in self.secrets:
            if len(secret) > 5:
                text = text.replace(secret, "*" * (len(secret) - 5) + secret[-5:])
            else:
                text = text.replace(secret, "*****")

        for regex, repl in self.rules:
            text = regex.sub(repl, text)

        return text
