"""
zkflow.engines.groth16
======================

In-process Groth16 verifier for BN254, compatible with the SnarkJS JSON
layout (see ``zkflow.engines.loader``).

Verification equation
---------------------
    e(A, B) == e(alpha1, beta2) * e(VK_x, gamma2) * e(C, delta2)

checked as a product in GT:
    e(A, B) * e(-alpha1, beta2) * e(-VK_x, gamma2) * e(-C, delta2) == 1

with VK_x = IC[0] + sum_i s_i * IC[i+1] over the public signals s_i.

Malformed keys, proofs or signals (wrong shapes, off-curve points, values
outside their field, a protocol/curve tag other than groth16/bn128) make
``verify`` return False rather than raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence

from . import loader
from .pairing import (
    G1Point,
    G2Point,
    add,
    check_pairing_product,
    curve_order,
    g1_point,
    g2_point,
    is_on_curve_g1,
    is_on_curve_g2,
    multiply,
    neg,
)

log = logging.getLogger(__name__)

_FR = curve_order()
_CURVES = ("bn128", "bn254", "altbn128")


@dataclass(frozen=True)
class VerifyingKey:
    alpha1: G1Point
    beta2: G2Point
    gamma2: G2Point
    delta2: G2Point
    IC: List[G1Point]


@dataclass(frozen=True)
class Groth16Proof:
    A: G1Point
    B: G2Point
    C: G1Point


def _check_tags(obj: Mapping[str, Any], what: str) -> None:
    protocol = obj.get("protocol", "groth16")
    curve = obj.get("curve", "bn128")
    if str(protocol).lower() != "groth16":
        raise ValueError(f"{what} protocol is {protocol!r}, expected groth16")
    if str(curve).lower() not in _CURVES:
        raise ValueError(f"{what} curve is {curve!r}, expected bn128")


def load_vk(vk_json: Mapping[str, Any]) -> VerifyingKey:
    _check_tags(vk_json, "verification key")
    vk = loader.normalize_groth16_vk(vk_json)
    out = VerifyingKey(
        alpha1=g1_point(*vk["vk_alpha_1"]),
        beta2=g2_point(*vk["vk_beta_2"]),
        gamma2=g2_point(*vk["vk_gamma_2"]),
        delta2=g2_point(*vk["vk_delta_2"]),
        IC=[g1_point(*p) for p in vk["IC"]],
    )
    if not (
        is_on_curve_g1(out.alpha1)
        and is_on_curve_g2(out.beta2)
        and is_on_curve_g2(out.gamma2)
        and is_on_curve_g2(out.delta2)
        and all(is_on_curve_g1(p) for p in out.IC)
    ):
        raise ValueError("verification key points are not on curve")
    return out


def load_proof(proof_json: Mapping[str, Any]) -> Groth16Proof:
    _check_tags(proof_json, "proof")
    pf = loader.normalize_groth16_proof(proof_json)
    out = Groth16Proof(A=g1_point(*pf["pi_a"]), B=g2_point(*pf["pi_b"]), C=g1_point(*pf["pi_c"]))
    if not (is_on_curve_g1(out.A) and is_on_curve_g2(out.B) and is_on_curve_g1(out.C)):
        raise ValueError("proof points are not on curve")
    return out


def vk_x(IC: Sequence[G1Point], signals: Sequence[int]) -> G1Point:
    if len(IC) != len(signals) + 1:
        raise ValueError(f"IC length {len(IC)} != 1 + {len(signals)} public signals")
    acc = IC[0]
    for i, s in enumerate(signals):
        if not 0 <= s < _FR:
            raise ValueError("public signal outside the scalar field")
        if s:
            acc = add(acc, multiply(IC[i + 1], s))
    return acc


def verify_groth16(
    vk_json: Mapping[str, Any],
    public_signals: Sequence[Any],
    proof_json: Mapping[str, Any],
) -> bool:
    try:
        vk = load_vk(vk_json)
        pf = load_proof(proof_json)
        acc = vk_x(vk.IC, loader.normalize_public_signals(public_signals))
        return check_pairing_product(
            [
                (pf.A, pf.B),
                (neg(vk.alpha1), vk.beta2),
                (neg(acc), vk.gamma2),
                (neg(pf.C), vk.delta2),
            ]
        )
    except (ValueError, TypeError, KeyError, IndexError) as e:
        log.info("groth16 input rejected", extra={"reason": str(e)})
        return False


class PyEccVerificationEngine:
    """VerificationEngine backed by py_ecc; pure, no I/O."""

    name = "pyecc"

    def verify(
        self,
        verification_key: Mapping[str, Any],
        public_signals: Sequence[Any],
        proof: Mapping[str, Any],
    ) -> bool:
        return verify_groth16(verification_key, public_signals, proof)


__all__ = [
    "VerifyingKey",
    "Groth16Proof",
    "load_vk",
    "load_proof",
    "vk_x",
    "verify_groth16",
    "PyEccVerificationEngine",
]
