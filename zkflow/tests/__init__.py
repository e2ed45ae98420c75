"""
zkflow.tests helpers

Shared utilities for zkflow tests. Importing this package only needs py_ecc
and Hypothesis; Node/snarkjs are never required.

Exports:
- TEST_ROOT
- env_flag(name, default=False) -> bool
- configure_test_logging() -> None
- Groth16Simulator: trapdoor setup that emits SnarkJS-shaped keys and proofs
- ScriptedPrompt / EchoCapture: injected I/O for the workflow controller
- SimulatedProvingEngine / RecordingVerifier: in-process engines

Environment toggles:
- ZKFLOW_TEST_LOG=1         -> enable DEBUG logging for zkflow.*
- HYPOTHESIS_PROFILE=dev|ci -> Hypothesis profile (default "ci" on CI, else "dev")
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from hypothesis import HealthCheck, settings
from py_ecc.optimized_bn128 import G1, G2, multiply

from zkflow.circuit import FIELD_MODULUS
from zkflow.engines.pairing import to_affine_g1, to_affine_g2
from zkflow.errors import ProofGenerationError, ZKFlowErrorCode
from zkflow.types import ProofBundle, ProveResult
from zkflow.witness import Witness

TEST_ROOT: Path = Path(__file__).resolve().parent

R = FIELD_MODULUS


# --- Env & logging -------------------------------------------------------------


def env_flag(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def is_ci() -> bool:
    return any(env_flag(k) for k in ("CI", "GITHUB_ACTIONS"))


def configure_test_logging(level: int = logging.DEBUG) -> None:
    """Route zkflow.* logs to stderr when ZKFLOW_TEST_LOG is set."""
    if env_flag("ZKFLOW_TEST_LOG", False):
        from zkflow import logging as zlog

        zlog.configure(level=level)


settings.register_profile(
    "dev",
    settings(max_examples=50, deadline=None, suppress_health_check=(HealthCheck.too_slow,)),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        derandomize=True,
        suppress_health_check=(HealthCheck.too_slow,),
    ),
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE") or ("ci" if is_ci() else "dev"))

configure_test_logging()


# --- Groth16 simulator -----------------------------------------------------------


def g1_json(P: Any) -> List[str]:
    x, y = to_affine_g1(P)
    return [str(x), str(y), "1"]


def g2_json(Q: Any) -> List[List[str]]:
    (x0, x1), (y0, y1) = to_affine_g2(Q)
    return [[str(x0), str(x1)], [str(y0), str(y1)], ["1", "0"]]


class Groth16Simulator:
    """
    Groth16 setup with a known trapdoor. Knowing alpha, beta, gamma, delta and
    the IC discrete logs lets us forge a C that satisfies

        e(A, B) == e(alpha1, beta2) * e(VK_x, gamma2) * e(C, delta2)

    for any public signals, so tests get real pairing-checked proofs without
    a circuit compiler.
    """

    def __init__(
        self,
        n_public: int = 1,
        *,
        alpha: int = 7,
        beta: int = 11,
        gamma: int = 13,
        delta: int = 17,
        ic: Optional[Sequence[int]] = None,
    ):
        self.alpha, self.beta, self.gamma, self.delta = alpha, beta, gamma, delta
        self.ic = list(ic) if ic is not None else [19 + 4 * i for i in range(n_public + 1)]
        if len(self.ic) != n_public + 1:
            raise ValueError("ic needs n_public + 1 scalars")
        self.n_public = n_public

    def verification_key(self) -> Dict[str, Any]:
        return {
            "protocol": "groth16",
            "curve": "bn128",
            "nPublic": self.n_public,
            "vk_alpha_1": g1_json(multiply(G1, self.alpha)),
            "vk_beta_2": g2_json(multiply(G2, self.beta)),
            "vk_gamma_2": g2_json(multiply(G2, self.gamma)),
            "vk_delta_2": g2_json(multiply(G2, self.delta)),
            "IC": [g1_json(multiply(G1, k)) for k in self.ic],
        }

    def prove(self, public_signals: Sequence[int], *, ra: int = 23, rb: int = 29) -> Dict[str, Any]:
        x = self.ic[0] + sum(s * k for s, k in zip(public_signals, self.ic[1:]))
        c = (ra * rb - self.alpha * self.beta - x * self.gamma) * pow(self.delta, -1, R) % R
        return {
            "pi_a": g1_json(multiply(G1, ra)),
            "pi_b": g2_json(multiply(G2, rb)),
            "pi_c": g1_json(multiply(G1, c)),
            "protocol": "groth16",
            "curve": "bn128",
        }


# --- Injected I/O ---------------------------------------------------------------


class ScriptedPrompt:
    """Answers prompts from a fixed script and records the labels asked."""

    def __init__(self, answers: Iterable[str]):
        self._answers = list(answers)
        self.asked: List[str] = []

    def __call__(self, label: str) -> str:
        self.asked.append(label)
        if not self._answers:
            raise AssertionError(f"unexpected prompt {label!r}")
        return self._answers.pop(0)


class EchoCapture:
    def __init__(self) -> None:
        self.lines: List[str] = []

    def __call__(self, line: str) -> None:
        self.lines.append(line)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


# --- Engines ----------------------------------------------------------------------


class SimulatedProvingEngine:
    """
    Proves the private multiplication circuit (c = a * b mod r) with a
    Groth16Simulator. Unusable witnesses are rejected like a real prover.
    """

    name = "simulated"

    def __init__(self, sim: Groth16Simulator):
        self.sim = sim
        self.calls: List[Witness] = []

    def full_prove(self, witness: Witness, circuit_program: Path, proving_key: Path) -> ProveResult:
        self.calls.append(witness)
        bad = witness.invalid_signals()
        if bad:
            return ProveResult.failure(
                ProofGenerationError(code=ZKFlowErrorCode.INVALID_WITNESS, ctx={"signals": bad})
            )
        c = witness["a"] * witness["b"] % R
        return ProveResult.success(ProofBundle.from_json(self.sim.prove([c]), [str(c)]))


class FailingProvingEngine:
    name = "failing"

    def __init__(self, code: ZKFlowErrorCode = ZKFlowErrorCode.PROVER_REJECTED):
        self.code = code

    def full_prove(self, witness: Witness, circuit_program: Path, proving_key: Path) -> ProveResult:
        return ProveResult.failure(ProofGenerationError("rejected", code=self.code))


class RecordingVerifier:
    """Returns a fixed answer and records every call."""

    name = "recording"

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.calls: List[tuple] = []

    def verify(self, verification_key: Any, public_signals: Any, proof: Any) -> bool:
        self.calls.append((verification_key, public_signals, proof))
        return self.answer


__all__ = [
    "TEST_ROOT",
    "R",
    "env_flag",
    "is_ci",
    "configure_test_logging",
    "g1_json",
    "g2_json",
    "Groth16Simulator",
    "ScriptedPrompt",
    "EchoCapture",
    "SimulatedProvingEngine",
    "FailingProvingEngine",
    "RecordingVerifier",
]
