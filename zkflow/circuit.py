"""
Circuit descriptions known to the workflow.

The workflow never looks inside a circuit; it only needs the ordered names of
the private input signals it must prompt for and the names of the public
outputs it renders next to the public signals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from py_ecc.optimized_bn128 import curve_order

from .errors import ConfigError

# Scalar field of BN254 (snarkjs "bn128"); witness values live here.
FIELD_MODULUS: int = int(curve_order)


@dataclass(frozen=True)
class CircuitSpec:
    name: str
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]


PRIVATE_MULTIPLICATION = CircuitSpec(
    name="private_multiplication",
    inputs=("a", "b"),
    outputs=("c",),
)

_CIRCUITS: Dict[str, CircuitSpec] = {PRIVATE_MULTIPLICATION.name: PRIVATE_MULTIPLICATION}


def get_circuit(name: str) -> CircuitSpec:
    try:
        return _CIRCUITS[name]
    except KeyError:
        raise ConfigError(f"unknown circuit {name!r}", known=sorted(_CIRCUITS)) from None


def is_field_element(value: object) -> bool:
    """True for plain ints in [0, r)."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < FIELD_MODULUS
