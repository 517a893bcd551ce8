"""Tests for the Argument Binder"""

import copy
import json
import math
import pickle
import sys

import pytest

from toolbridge.binding import BoundArguments, bind_arguments, coerce_value
from toolbridge.core.exceptions import ToolConstructionError
from toolbridge.schema.extractor import extract_parameters
from toolbridge.schema.types import MISSING, ParameterDescriptor, SemanticType, is_missing


@pytest.fixture
def search_params(search_schema):
    return extract_parameters(search_schema)


class TestMissingMarker:
    """Tests for the MISSING marker"""

    def test_distinct_from_null_and_empty(self):
        assert MISSING is not None
        assert MISSING != ""
        assert is_missing(MISSING)
        assert not is_missing(None)
        assert not is_missing("")

    def test_singleton_survives_copy_and_pickle(self):
        assert copy.copy(MISSING) is MISSING
        assert copy.deepcopy(MISSING) is MISSING
        assert pickle.loads(pickle.dumps(MISSING)) is MISSING

    def test_repr(self):
        assert repr(MISSING) == "MISSING"


class TestCoerceValue:
    """Tests for best-effort coercion"""

    @pytest.mark.parametrize(
        "value, expected",
        [("abc", "abc"), (5, "5"), (2.5, "2.5"), (True, "true"), (False, "false")],
    )
    def test_to_string(self, value, expected):
        assert coerce_value(value, SemanticType.STRING) == expected

    def test_to_string_forwards_containers(self):
        value = {"a": 1}
        assert coerce_value(value, SemanticType.STRING) is value

    @pytest.mark.parametrize(
        "value, expected", [(5, 5.0), (2.5, 2.5), ("7", 7.0), (" 3.25 ", 3.25), ("-1e3", -1000.0)]
    )
    def test_to_number(self, value, expected):
        result = coerce_value(value, SemanticType.NUMBER)
        assert result == expected
        assert isinstance(result, float)

    @pytest.mark.parametrize("value", ["abc", "", "nan", "inf", True, [1], {"a": 1}])
    def test_to_number_forwards_non_conforming(self, value):
        assert coerce_value(value, SemanticType.NUMBER) == value

    def test_to_number_forwards_integers_beyond_float_range(self):
        huge = 10**400
        assert coerce_value(huge, SemanticType.NUMBER) == huge
        assert coerce_value(-huge, SemanticType.NUMBER) == -huge

    @pytest.mark.skipif(
        not hasattr(sys, "set_int_max_str_digits"), reason="no int to str digit limit"
    )
    def test_to_string_forwards_integers_too_long_for_str(self):
        huge = 10**5000
        assert coerce_value(huge, SemanticType.STRING) is huge

    def test_to_array(self):
        assert coerce_value([1, 2], SemanticType.ARRAY) == [1, 2]
        assert coerce_value((1, 2), SemanticType.ARRAY) == [1, 2]
        assert coerce_value(frozenset({3}), SemanticType.ARRAY) == [3]

    def test_to_array_forwards_scalars(self):
        assert coerce_value("a,b", SemanticType.ARRAY) == "a,b"
        assert coerce_value(4, SemanticType.ARRAY) == 4

    def test_unspecified_passes_through(self):
        value = object()
        assert coerce_value(value, SemanticType.UNSPECIFIED) is value

    @pytest.mark.parametrize("semantic_type", list(SemanticType))
    def test_none_passes_through(self, semantic_type):
        assert coerce_value(None, semantic_type) is None

    def test_matching_list_is_same_object(self):
        value = ["x"]
        assert coerce_value(value, SemanticType.ARRAY) is value


class TestBindArguments:
    """Tests for bind_arguments"""

    def test_supplied_required_and_default(self, search_params):
        bound = bind_arguments(search_params, {"q": "status"})
        assert bound == {"q": "status", "limit": 10.0}

    def test_missing_required_gets_marker(self, search_params):
        bound = bind_arguments(search_params, {"limit": 5})
        assert bound["q"] is MISSING
        assert bound["limit"] == 5.0
        assert isinstance(bound["limit"], float)
        assert bound.missing == ["q"]

    def test_all_supplied_no_defaults_applied(self, search_params):
        bound = bind_arguments(search_params, {"q": "x", "limit": "3"})
        assert bound.to_dict() == {"q": "x", "limit": 3.0}

    def test_optional_without_default_binds_none(self):
        params = extract_parameters({"properties": {"tag": {"type": "string"}}})
        bound = bind_arguments(params, {})
        assert "tag" in bound
        assert bound["tag"] is None

    def test_unknown_arguments_ignored(self, search_params):
        bound = bind_arguments(search_params, {"q": "x", "extra": 1})
        assert list(bound) == ["q", "limit"]

    def test_schema_order_kept(self, search_params):
        bound = bind_arguments(search_params, {"limit": 1, "q": "x"})
        assert list(bound) == ["q", "limit"]

    def test_explicit_none_is_a_supplied_value(self, search_params):
        bound = bind_arguments(search_params, {"q": None})
        assert bound["q"] is None
        assert bound.missing == []

    def test_zero_parameters(self):
        bound = bind_arguments((), {"anything": 1})
        assert len(bound) == 0
        assert bound.to_wire() == {}

    def test_arguments_none(self, search_params):
        bound = bind_arguments(search_params, None)
        assert bound["q"] is MISSING

    def test_unavailable_parameter_list(self):
        with pytest.raises(ToolConstructionError):
            bind_arguments(None, {"q": "x"})

    def test_fresh_set_per_call(self, search_params):
        first = bind_arguments(search_params, {"q": "a"})
        second = bind_arguments(search_params, {"q": "b"})
        assert first["q"] == "a"
        assert second["q"] == "b"

    def test_default_kind_mismatch_is_bound_verbatim(self):
        params = (
            ParameterDescriptor(
                name="n", semantic_type=SemanticType.NUMBER, required=False, default_value="7"
            ),
        )
        assert bind_arguments(params, {})["n"] == "7"

    def test_integer_default_beyond_float_range(self):
        schema = json.loads(
            '{"properties": {"n": {"type": "number", "default": 1' + "0" * 400 + "}}}"
        )
        bound = bind_arguments(extract_parameters(schema), {})
        assert bound["n"] == math.inf


class TestBoundArguments:
    """Tests for BoundArguments"""

    def test_to_wire_drops_missing(self):
        bound = BoundArguments({"a": MISSING, "b": None, "c": 1})
        assert bound.to_wire() == {"b": None, "c": 1}
        assert bound.to_dict() == {"a": MISSING, "b": None, "c": 1}

    def test_equality(self):
        assert BoundArguments({"a": 1}) == BoundArguments({"a": 1})
        assert BoundArguments({"a": 1}) == {"a": 1}
        assert BoundArguments({"a": 1}) != {"a": 2}

    def test_read_only(self):
        bound = BoundArguments({"a": 1})
        with pytest.raises(TypeError):
            bound["a"] = 2
