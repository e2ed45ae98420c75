"""
Value types passed between the workflow and the engines.

``ProveResult`` is the result variant returned by every proving engine:
either a ``ProofBundle`` or a ``ProofGenerationError``, never both.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Tuple

from .errors import ProofGenerationError

Proof = Mapping[str, Any]
PublicSignals = Tuple[str, ...]
VerificationKey = Mapping[str, Any]


def freeze_signals(values: Sequence[Any]) -> PublicSignals:
    return tuple(str(v) for v in values)


@dataclass(slots=True, frozen=True)
class ProofBundle:
    proof: Proof
    public_signals: PublicSignals

    @classmethod
    def from_json(cls, proof: Mapping[str, Any], public_signals: Sequence[Any]) -> "ProofBundle":
        return cls(proof=MappingProxyType(dict(proof)), public_signals=freeze_signals(public_signals))

    def proof_dict(self) -> dict:
        return dict(self.proof)


@dataclass(slots=True, frozen=True)
class ProveResult:
    bundle: Optional[ProofBundle] = None
    error: Optional[ProofGenerationError] = None

    def __post_init__(self) -> None:
        if (self.bundle is None) == (self.error is None):
            raise ValueError("ProveResult holds exactly one of bundle / error")

    @property
    def ok(self) -> bool:
        return self.bundle is not None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, bundle: ProofBundle) -> "ProveResult":
        return cls(bundle=bundle)

    @classmethod
    def failure(cls, error: ProofGenerationError) -> "ProveResult":
        return cls(error=error)


__all__ = [
    "Proof",
    "PublicSignals",
    "VerificationKey",
    "ProofBundle",
    "ProveResult",
    "freeze_signals",
]
