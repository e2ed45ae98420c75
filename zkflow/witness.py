"""
Witness collection.

``WitnessCollector.collect()`` prompts once per declared input signal, in
declaration order, and returns an immutable ``Witness``. Parsing never fails:
text that is not an integer literal becomes ``NOT_A_NUMBER`` and is forwarded
as-is. Whether the witness is usable is decided by the proving engine, so a
typo and an unsatisfiable witness produce the same user-facing outcome.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Union

from .circuit import CircuitSpec, is_field_element

log = logging.getLogger(__name__)

NOT_A_NUMBER: float = math.nan

SignalValue = Union[int, float]
PromptFn = Callable[[str], str]

# decimal or 0x-hex, optional sign, optional JS BigInt suffix
_INT_RE = re.compile(r"^\s*([+-]?(?:0[xX][0-9a-fA-F]+|\d+))n?\s*$")


def parse_signal_value(text: str) -> SignalValue:
    m = _INT_RE.match(text or "")
    if not m:
        return NOT_A_NUMBER
    literal = m.group(1)
    base = 16 if literal.lstrip("+-")[:2].lower() == "0x" else 10
    try:
        return int(literal, base)
    except ValueError:
        # beyond the interpreter's int-from-str digit limit; out of field anyway
        return NOT_A_NUMBER


def is_not_a_number(value: object) -> bool:
    return isinstance(value, float) and math.isnan(value)


class Witness(Mapping):
    """Read-only, insertion-ordered mapping of signal name to value."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, SignalValue]):
        self._values = MappingProxyType(dict(values))

    def __getitem__(self, key: str) -> SignalValue:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        # values are private; only names and validity are shown
        return f"Witness(signals={list(self._values)}, valid={self.is_valid()})"

    def invalid_signals(self) -> List[str]:
        return [k for k, v in self._values.items() if not is_field_element(v)]

    def is_valid(self) -> bool:
        return not self.invalid_signals()

    def to_input_json(self) -> Dict[str, str]:
        """
        snarkjs input object. Field elements are sent as decimal strings so
        that values above 2**53 survive the JS side.
        """
        bad = self.invalid_signals()
        if bad:
            raise ValueError(f"witness has non-field values for signals: {', '.join(bad)}")
        return {k: str(v) for k, v in self._values.items()}


class WitnessCollector:
    def __init__(self, circuit: CircuitSpec, prompt: PromptFn):
        self.circuit = circuit
        self._prompt = prompt

    def collect(self) -> Witness:
        values: Dict[str, SignalValue] = {}
        for name in self.circuit.inputs:
            raw = self._prompt(f"Enter {name}: ")
            values[name] = parse_signal_value(raw)
            if is_not_a_number(values[name]):
                log.debug("unparsable value forwarded", extra={"signal": name})
        return Witness(values)


__all__ = [
    "NOT_A_NUMBER",
    "SignalValue",
    "Witness",
    "WitnessCollector",
    "is_not_a_number",
    "parse_signal_value",
]
