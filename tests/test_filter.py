"""
Tests du filtre de champs
"""

import pytest

from hostmeta.core.errors import InvalidPatternError
from hostmeta.core.filter import FieldFilter, attribute_value_to_string


ATTRIBUTES = {
    "host.name": "web-1",
    "host.id": "i-123",
    "k8s.pod.name": "api-7f9",
    "k8s.namespace.name": "prod",
    "service.name": "checkout",
    "replicas": 3,
    "enabled": True,
}


class TestFieldFilterConstruction:
    """Compilation des règles"""

    def test_valid_patterns_are_compiled_in_order(self):
        f = FieldFilter([r"^host\.", r"k8s\..*"])
        assert [r.pattern for r in f.regexes] == [r"^host\.", r"k8s\..*"]
        assert len(f) == 2

    def test_invalid_pattern_raises(self):
        with pytest.raises(InvalidPatternError) as exc_info:
            FieldFilter([r"^host\.", r"k8s\.(", r"service"])
        assert exc_info.value.pattern == r"k8s\.("

    def test_empty_rule_set(self):
        f = FieldFilter([])
        assert f.filter_in(ATTRIBUTES) == {}
        assert set(f.filter_out(ATTRIBUTES)) == set(ATTRIBUTES)


class TestFieldFilterClassification:
    """filter_in / filter_out"""

    def test_filter_in_keeps_matching_keys(self):
        f = FieldFilter([r"^host\.", r"^k8s\.pod"])
        assert f.filter_in(ATTRIBUTES) == {
            "host.name": "web-1",
            "host.id": "i-123",
            "k8s.pod.name": "api-7f9",
        }

    def test_filter_out_keeps_non_matching_keys(self):
        f = FieldFilter([r"^host\.", r"^k8s\.pod"])
        assert f.filter_out(ATTRIBUTES) == {
            "k8s.namespace.name": "prod",
            "service.name": "checkout",
            "replicas": "3",
            "enabled": "true",
        }

    def test_match_anywhere_in_key(self):
        f = FieldFilter([r"name"])
        assert set(f.filter_in(ATTRIBUTES)) == {
            "host.name", "k8s.pod.name", "k8s.namespace.name", "service.name"
        }

    @pytest.mark.parametrize("patterns", [
        [],
        [r".*"],
        [r"^host"],
        [r"pod", r"namespace", r"^s"],
        [r"nothing-matches-this"],
    ])
    def test_filter_in_and_out_partition_attributes(self, patterns):
        f = FieldFilter(patterns)
        kept = f.filter_in(ATTRIBUTES)
        dropped = f.filter_out(ATTRIBUTES)

        assert set(kept).isdisjoint(dropped)
        assert set(kept) | set(dropped) == set(ATTRIBUTES)

    def test_input_is_not_modified(self):
        attributes = dict(ATTRIBUTES)
        FieldFilter([r"host"]).filter_in(attributes)
        assert attributes == ATTRIBUTES


class TestAttributeValueToString:
    """Conversion des valeurs sans perte"""

    @pytest.mark.parametrize("value,expected", [
        ("text", "text"),
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (-7, "-7"),
        (1.0, "1"),
        (1.5, "1.5"),
        (0.1, "0.1"),
        (1e20, "100000000000000000000"),
        (1e-7, "0.0000001"),
        (float("nan"), "NaN"),
        (float("inf"), "+Inf"),
        (float("-inf"), "-Inf"),
        (None, ""),
        (b"\x00\x01", "AAE="),
        ({"a": 1}, '{"a":1}'),
        ([1, "b"], '[1,"b"]'),
    ])
    def test_conversion(self, value, expected):
        assert attribute_value_to_string(value) == expected
