"""
Filtre de champs par expressions régulières

Classe un ensemble d'attributs clé/valeur en champs "retenus" ou "écartés"
selon une liste ordonnée d'expressions régulières compilées.
"""

import base64
import json
import math
import re
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Pattern, Tuple

from .errors import InvalidPatternError


def attribute_value_to_string(value: Any) -> str:
    """
    Convertit une valeur d'attribut en chaîne sans perte d'information

    Args:
        value: Valeur typée (str, bool, int, float, bytes, dict, list)

    Returns:
        str: Représentation textuelle de la valeur
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    # bool avant int : bool est une sous-classe de int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, Mapping):
        return json.dumps(dict(value), separators=(",", ":"), default=str)
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value), separators=(",", ":"), default=str)
    return str(value)


def _format_float(value: float) -> str:
    """Format décimal le plus court, sans exposant"""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


class FieldFilter:
    """
    Filtre d'attributs basé sur une liste de règles regex

    La construction est atomique : si une seule expression ne compile pas,
    InvalidPatternError est levée et aucun filtre n'est créé.
    """

    def __init__(self, patterns: Iterable[str]):
        """
        Compile les règles du filtre

        Args:
            patterns: Expressions régulières, dans l'ordre d'évaluation

        Raises:
            InvalidPatternError: Si une expression est invalide
        """
        compiled = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                raise InvalidPatternError(pattern, str(e)) from e

        self.regexes: Tuple[Pattern, ...] = tuple(compiled)

    def __len__(self) -> int:
        return len(self.regexes)

    def _matches(self, key: str) -> bool:
        for regex in self.regexes:
            if regex.search(key):
                return True
        return False

    def filter_in(self, attributes: Mapping[str, Any]) -> Dict[str, str]:
        """
        Retourne les champs qui correspondent à au moins une règle

        Args:
            attributes: Attributs à classer

        Returns:
            dict: Champs retenus, valeurs converties en chaînes
        """
        return {
            key: attribute_value_to_string(value)
            for key, value in attributes.items()
            if self._matches(key)
        }

    def filter_out(self, attributes: Mapping[str, Any]) -> Dict[str, str]:
        """
        Retourne les champs qui ne correspondent à aucune règle

        Args:
            attributes: Attributs à classer

        Returns:
            dict: Champs non retenus, valeurs converties en chaînes
        """
        return {
            key: attribute_value_to_string(value)
            for key, value in attributes.items()
            if not self._matches(key)
        }
