"""
zkflow.engines.loader
=====================

Load and normalize SnarkJS Groth16 JSON artifacts (BN254, "bn128" in SnarkJS).

This module does **not** verify anything; it reads files, coerces bigint-like
strings into Python ints and normalizes point shapes so verifiers can consume
them.

SnarkJS shapes
--------------
verification_key.json:
{
  "protocol": "groth16",
  "curve": "bn128",
  "nPublic": 1,
  "vk_alpha_1": ["x", "y", "1"],
  "vk_beta_2":  [["x0","x1"], ["y0","y1"], ["1","0"]],
  "vk_gamma_2": ...,
  "vk_delta_2": ...,
  "IC": [["x","y","1"], ...]
}

proof.json:
{
  "pi_a": ["x", "y", "1"],
  "pi_b": [["x0","x1"], ["y0","y1"], ["1","0"]],
  "pi_c": ["x", "y", "1"],
  "protocol": "groth16",
  "curve": "bn128"
}

Points may carry the trailing projective coordinate emitted by SnarkJS; it
must be 1 (or 0 for the point at infinity, which we encode as all-zero).
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

import msgspec

from ..errors import VerificationKeyError, ZKFlowErrorCode

_INT_RE = re.compile(r"^\s*([+-]?(?:0x[0-9a-fA-F]+|\d+))n?\s*$")


def load_verification_key(path: Path | str) -> Dict[str, Any]:
    """
    Read a verification key JSON document. The content stays opaque here;
    only I/O and JSON syntax are checked. Raises VerificationKeyError.
    """
    p = Path(path)
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise VerificationKeyError(
            f"cannot read verification key: {e.strerror or e}", path=str(p), cause=e
        ) from e
    try:
        doc = msgspec.json.decode(raw)
    except msgspec.DecodeError as e:
        raise VerificationKeyError(
            f"verification key is not valid JSON: {e}",
            path=str(p),
            code=ZKFlowErrorCode.VKEY_MALFORMED,
            cause=e,
        ) from e
    if not isinstance(doc, dict):
        raise VerificationKeyError(
            "verification key must be a JSON object",
            path=str(p),
            code=ZKFlowErrorCode.VKEY_MALFORMED,
        )
    return doc


def load_json_file(path: Path | str) -> Any:
    """Plain JSON read used for proof/public files (errors propagate)."""
    return msgspec.json.decode(Path(path).read_bytes())


def to_int(x: Any) -> int:
    """Coerce ints, decimal / 0x strings (optionally with JS 'n' suffix) to int."""
    if isinstance(x, bool):
        raise ValueError("boolean is not a field element")
    if isinstance(x, int):
        return x
    if isinstance(x, str):
        m = _INT_RE.match(x)
        if m:
            return int(m.group(1), 0) if "x" in m.group(1).lower() else int(m.group(1), 10)
    raise ValueError(f"not an integer: {x!r}")


def norm_g1(pt: Iterable[Any]) -> Tuple[int, int]:
    arr = list(pt)
    if len(arr) == 3:
        z = to_int(arr[2])
        if z == 0:
            return (0, 0)
        if z != 1:
            raise ValueError("G1 point must be affine (z == 1)")
        arr = arr[:2]
    if len(arr) != 2:
        raise ValueError("G1 point must have 2 coordinates")
    return (to_int(arr[0]), to_int(arr[1]))


def norm_g2(pt: Iterable[Iterable[Any]]) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    arr = [list(a) for a in pt]
    if len(arr) == 3:
        z = [to_int(c) for c in arr[2]]
        if z == [0, 0]:
            return ((0, 0), (0, 0))
        if z != [1, 0]:
            raise ValueError("G2 point must be affine (z == [1, 0])")
        arr = arr[:2]
    if len(arr) != 2 or len(arr[0]) != 2 or len(arr[1]) != 2:
        raise ValueError("G2 point must be [[x0,x1],[y0,y1]]")
    return (
        (to_int(arr[0][0]), to_int(arr[0][1])),
        (to_int(arr[1][0]), to_int(arr[1][1])),
    )


def is_groth16_vk(obj: Mapping[str, Any]) -> bool:
    return all(k in obj for k in ("vk_alpha_1", "vk_beta_2", "vk_gamma_2", "vk_delta_2", "IC"))


def is_groth16_proof(obj: Mapping[str, Any]) -> bool:
    return all(k in obj for k in ("pi_a", "pi_b", "pi_c"))


def normalize_groth16_vk(vk: Mapping[str, Any]) -> Dict[str, Any]:
    """Same key names as SnarkJS, affine integer coordinates everywhere."""
    if not is_groth16_vk(vk):
        raise ValueError("object does not look like a Groth16 verification key")
    ic = vk["IC"]
    if not isinstance(ic, list) or not ic:
        raise ValueError("vk.IC must be a non-empty list of G1 points")
    out: Dict[str, Any] = {k: str(vk[k]) for k in ("protocol", "curve") if k in vk}
    out["vk_alpha_1"] = norm_g1(vk["vk_alpha_1"])
    out["vk_beta_2"] = norm_g2(vk["vk_beta_2"])
    out["vk_gamma_2"] = norm_g2(vk["vk_gamma_2"])
    out["vk_delta_2"] = norm_g2(vk["vk_delta_2"])
    out["IC"] = [norm_g1(p) for p in ic]
    return out


def normalize_groth16_proof(proof: Mapping[str, Any]) -> Dict[str, Any]:
    """Accept a flat proof or a {proof, publicSignals} bundle; return the flat proof."""
    if isinstance(proof.get("proof"), Mapping):
        proof = proof["proof"]
    for k in ("pi_a", "pi_b", "pi_c"):
        if k not in proof:
            raise ValueError(f"Groth16 proof missing '{k}'")
    out: Dict[str, Any] = {k: str(proof[k]) for k in ("protocol", "curve") if k in proof}
    out["pi_a"] = norm_g1(proof["pi_a"])
    out["pi_b"] = norm_g2(proof["pi_b"])
    out["pi_c"] = norm_g1(proof["pi_c"])
    return out


def normalize_public_signals(values: Sequence[Any]) -> List[int]:
    if not isinstance(values, (list, tuple)):
        raise ValueError("publicSignals must be a list")
    return [to_int(v) for v in values]


__all__ = [
    "load_verification_key",
    "load_json_file",
    "to_int",
    "norm_g1",
    "norm_g2",
    "is_groth16_vk",
    "is_groth16_proof",
    "normalize_groth16_vk",
    "normalize_groth16_proof",
    "normalize_public_signals",
]
