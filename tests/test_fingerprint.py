"""Tests for snapshot fingerprints and their canonicalization rules."""

import math

import pytest

from triggergraph.contracts import ConditionRecord
from triggergraph.kernel.fingerprint import (
    CanonicalizationError,
    canonicalize_json,
    fingerprint_snapshot,
)


class TestCanonicalizeJson:
    """Tests for canonicalize_json function."""

    def test_simple_dict_sorts_keys(self):
        obj = {"b": 2, "a": 1, "c": 3}
        assert canonicalize_json(obj) == '{"a":1,"b":2,"c":3}'

    def test_nested_dict_sorts_recursively(self):
        obj = {"z": {"b": 2, "a": 1}, "a": {"d": 4, "c": 3}}
        assert canonicalize_json(obj) == '{"a":{"c":3,"d":4},"z":{"a":1,"b":2}}'

    def test_array_preserves_order(self):
        assert canonicalize_json({"items": [3, 1, 2]}) == '{"items":[3,1,2]}'

    def test_integral_floats_collapse_to_ints(self):
        assert canonicalize_json({"x": 250.0}) == canonicalize_json({"x": 250})
        assert canonicalize_json({"x": 250.5}) == '{"x":250.5}'

    def test_string_normalization_nfc(self):
        decomposed = "cafe\u0301"
        composed = "caf\u00e9"
        assert decomposed != composed
        assert canonicalize_json({"v": decomposed}) == canonicalize_json({"v": composed})

    def test_tuples_are_arrays(self):
        assert canonicalize_json({"t": (1, 2)}) == '{"t":[1,2]}'

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_nan_and_inf_rejected(self, bad):
        with pytest.raises(CanonicalizationError, match="NaN or Inf"):
            canonicalize_json({"x": bad})

    def test_non_string_keys_rejected(self):
        with pytest.raises(CanonicalizationError, match="keys must be strings"):
            canonicalize_json({1: "a"})

    def test_non_json_types_rejected(self):
        with pytest.raises(CanonicalizationError, match="Non-JSON type at x"):
            canonicalize_json({"x": object()})


class TestFingerprintSnapshot:
    def test_prefix_and_determinism(self):
        conditions = [{"field": "status", "operator": "equals", "value": "open"}]
        first = fingerprint_snapshot(conditions, [])
        assert first.startswith("sha256:")
        assert len(first) == len("sha256:") + 64
        assert fingerprint_snapshot(conditions, []) == first

    def test_key_order_does_not_matter(self):
        a = [{"field": "status", "operator": "equals", "value": "open"}]
        b = [{"value": "open", "operator": "equals", "field": "status"}]
        assert fingerprint_snapshot(a) == fingerprint_snapshot(b)

    def test_none_edges_equal_empty_edges(self):
        conditions = [{"field": "status", "operator": "equals", "value": "open"}]
        assert fingerprint_snapshot(conditions, None) == fingerprint_snapshot(conditions, [])

    def test_content_changes_change_fingerprint(self):
        base = [{"id": "a", "field": "status", "operator": "equals", "value": "open"}]
        edited = [{"id": "a", "field": "status", "operator": "equals", "value": "closed"}]
        with_id = [{"id": "b", "field": "status", "operator": "equals", "value": "open"}]
        assert fingerprint_snapshot(base) != fingerprint_snapshot(edited)
        assert fingerprint_snapshot(base) != fingerprint_snapshot(with_id)

    def test_condition_order_matters(self):
        a = {"id": "a", "field": "status", "operator": "equals", "value": "1"}
        b = {"id": "b", "field": "status", "operator": "equals", "value": "2"}
        assert fingerprint_snapshot([a, b]) != fingerprint_snapshot([b, a])

    def test_models_fingerprint_like_dicts(self):
        record = ConditionRecord(field="status", operator="equals", value="open")
        as_dict = {"field": "status", "operator": "equals", "value": "open"}
        assert fingerprint_snapshot([record]) == fingerprint_snapshot([as_dict])

    def test_unrepresentable_payload_does_not_raise(self):
        fp = fingerprint_snapshot([{"field": "status", "value": object}], [])
        assert fp.startswith("sha256:")
