from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from zkflow.circuit import FIELD_MODULUS, PRIVATE_MULTIPLICATION, get_circuit, is_field_element
from zkflow.errors import ConfigError
from zkflow.tests import ScriptedPrompt
from zkflow.witness import Witness, WitnessCollector, is_not_a_number, parse_signal_value


@pytest.mark.parametrize(
    "text,expected",
    [
        ("3", 3),
        ("  42 ", 42),
        ("0", 0),
        ("-5", -5),
        ("+7", 7),
        ("0x10", 16),
        ("0XfF", 255),
        ("12n", 12),
        (str(FIELD_MODULUS + 1), FIELD_MODULUS + 1),
    ],
)
def test_parse_integer_literals(text, expected):
    assert parse_signal_value(text) == expected


@pytest.mark.parametrize("text", ["x", "", "   ", "1.5", "3 4", "0x", "1e3", "abc12"])
def test_parse_non_numbers_become_nan(text):
    assert is_not_a_number(parse_signal_value(text))


@pytest.mark.parametrize("text", ["9" * 5000, "-" + "1" * 4400, "7" * 10_000 + "n"])
def test_parse_oversized_decimal_becomes_nan(text):
    assert is_not_a_number(parse_signal_value(text))


def test_parse_long_hex_is_not_limited():
    assert parse_signal_value("0x" + "f" * 5000) == int("f" * 5000, 16)


@given(st.integers(min_value=0, max_value=2**300))
def test_parse_decimal_text_is_exact(n):
    assert parse_signal_value(str(n)) == n


def test_collect_prompts_in_declaration_order():
    prompt = ScriptedPrompt(["3", "4"])
    w = WitnessCollector(PRIVATE_MULTIPLICATION, prompt).collect()
    assert prompt.asked == ["Enter a: ", "Enter b: "]
    assert dict(w) == {"a": 3, "b": 4}
    assert w.is_valid()


def test_collect_forwards_nan_without_failing():
    w = WitnessCollector(PRIVATE_MULTIPLICATION, ScriptedPrompt(["x", "4"])).collect()
    assert is_not_a_number(w["a"])
    assert w["b"] == 4
    assert w.invalid_signals() == ["a"]


def test_witness_is_read_only_and_hides_values():
    w = Witness({"a": 123456789, "b": 4})
    with pytest.raises(TypeError):
        w["a"] = 1  # type: ignore[index]
    assert "123456789" not in repr(w)


def test_input_json_uses_decimal_strings():
    big = FIELD_MODULUS - 1
    assert Witness({"a": big, "b": 2}).to_input_json() == {"a": str(big), "b": "2"}


@pytest.mark.parametrize("bad", [-1, FIELD_MODULUS, float("nan"), True])
def test_input_json_rejects_non_field_values(bad):
    with pytest.raises(ValueError):
        Witness({"a": bad, "b": 1}).to_input_json()


def test_field_element_bounds():
    assert is_field_element(0)
    assert is_field_element(FIELD_MODULUS - 1)
    assert not is_field_element(FIELD_MODULUS)
    assert not is_field_element(-1)
    assert not is_field_element(False)


def test_unknown_circuit_is_config_error():
    assert get_circuit("private_multiplication") is PRIVATE_MULTIPLICATION
    with pytest.raises(ConfigError):
        get_circuit("nope")
