"""
zkflow.engines.pairing
======================

Thin BN254 (altbn128) Ate pairing wrapper over ``py_ecc.optimized_bn128``.

Public API
----------
- g1_point(x, y) / g2_point((x0, x1), (y0, y1))   affine ints -> backend points
- is_on_curve_g1(P), is_on_curve_g2(Q)
- check_pairing_product(pairs) -> bool          prod e(P_i, Q_i) == 1
- add, multiply, neg                              re-exported group ops
- curve_order()

Notes
-----
- e(P, Q) takes P in G1 and Q in G2; ``py_ecc`` expects (Q, P) and this
  wrapper handles the swap.
- Affine (0, 0) encodes the point at infinity, as in SnarkJS output.
- Inputs are validated to be on-curve before pairing.
"""

from __future__ import annotations

from typing import Any, Iterable, Tuple

from py_ecc.optimized_bn128 import (
    FQ,
    FQ2,
    FQ12,
    add,
    b as _B,
    b2 as _B2,
    curve_order as _Q,
    field_modulus as _P,
    is_inf,
    is_on_curve as _is_on_curve,
    multiply,
    neg,
    normalize as _normalize,
    pairing as _pairing,
)

# Backend points are opaque projective tuples.
G1Point = Any
G2Point = Any


def curve_order() -> int:
    """Order r of the BN254 scalar field."""
    return int(_Q)


def _coord(v: int) -> int:
    if not 0 <= v < _P:
        raise ValueError("coordinate outside the base field")
    return v


def g1_point(x: int, y: int) -> G1Point:
    if x == 0 and y == 0:
        return (FQ(1), FQ(1), FQ(0))
    return (FQ(_coord(x)), FQ(_coord(y)), FQ(1))


def g2_point(xx: Tuple[int, int], yy: Tuple[int, int]) -> G2Point:
    # Fq2 element c0 + c1*i is encoded as [c0, c1]
    if xx == (0, 0) and yy == (0, 0):
        return (FQ2([1, 0]), FQ2([1, 0]), FQ2([0, 0]))
    x0, x1, y0, y1 = (_coord(v) for v in (*xx, *yy))
    return (FQ2([x0, x1]), FQ2([y0, y1]), FQ2([1, 0]))


def is_on_curve_g1(P: G1Point) -> bool:
    return is_inf(P) or bool(_is_on_curve(P, _B))


def is_on_curve_g2(Q: G2Point) -> bool:
    return is_inf(Q) or bool(_is_on_curve(Q, _B2))


def to_affine_g1(P: G1Point) -> Tuple[int, int]:
    if is_inf(P):
        return (0, 0)
    x, y = _normalize(P)
    return int(x.n), int(y.n)


def to_affine_g2(Q: G2Point) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    if is_inf(Q):
        return ((0, 0), (0, 0))
    x, y = _normalize(Q)
    xs = tuple(int(getattr(c, "n", c)) for c in x.coeffs)
    ys = tuple(int(getattr(c, "n", c)) for c in y.coeffs)
    return (xs[0], xs[1]), (ys[0], ys[1])


def pair(P: G1Point, Q: G2Point) -> FQ12:
    """e(P, Q); raises ValueError on off-curve input."""
    if not is_on_curve_g1(P):
        raise ValueError("G1 point is not on curve")
    if not is_on_curve_g2(Q):
        raise ValueError("G2 point is not on curve")
    if is_inf(P) or is_inf(Q):
        return FQ12.one()
    return _pairing(Q, P)


def check_pairing_product(pairs: Iterable[Tuple[G1Point, G2Point]]) -> bool:
    """True iff prod e(P_i, Q_i) == 1 in GT."""
    acc = FQ12.one()
    for P, Q in pairs:
        acc *= pair(P, Q)
    return acc == FQ12.one()


__all__ = [
    "add",
    "multiply",
    "neg",
    "curve_order",
    "g1_point",
    "g2_point",
    "is_on_curve_g1",
    "is_on_curve_g2",
    "to_affine_g1",
    "to_affine_g2",
    "pair",
    "check_pairing_product",
]
