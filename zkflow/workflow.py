"""
zkflow.workflow
===============

The proof-request / verify state machine.

    COLLECTING_INPUTS -> PROVING -> PROOF_FAILED                          -> DONE
                                 -> PROOF_SUCCEEDED -> SKIPPED             -> DONE
                                                    -> VERIFYING -> VERIFICATION_PASSED -> DONE
                                                                 -> VERIFICATION_FAILED -> DONE

Policy
------
- A failed proof is an expected outcome: the user sees
  ``Incorrect inputs to the circuit`` and ``run()`` returns normally. The
  underlying reason is only logged.
- Verification is opt-in: only the exact answer ``y`` triggers it.
- A verification key that cannot be loaded raises ``VerificationKeyError``
  out of ``run()``; nothing here catches it.

I/O is injected (``prompt`` / ``echo``) so the controller is usable from the
CLI, from tests, or from another front end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

import msgspec

from .circuit import CircuitSpec
from .config import WorkflowConfig
from .engines import ProvingEngine, VerificationEngine
from .engines.loader import load_verification_key
from .logging import run_scope
from .types import ProofBundle
from .witness import PromptFn, WitnessCollector

log = logging.getLogger(__name__)

EchoFn = Callable[[str], None]

MSG_PROOF_FAILED = "Incorrect inputs to the circuit"
MSG_VERIFIED = "Verification OK"
MSG_INVALID = "Invalid proof"
VERIFY_PROMPT = "Verify? (y/n) "
AFFIRMATIVE = "y"


class WorkflowState(str, Enum):
    COLLECTING_INPUTS = "collecting_inputs"
    PROVING = "proving"
    PROOF_FAILED = "proof_failed"
    PROOF_SUCCEEDED = "proof_succeeded"
    SKIPPED = "skipped"
    VERIFYING = "verifying"
    VERIFICATION_PASSED = "verification_passed"
    VERIFICATION_FAILED = "verification_failed"
    DONE = "done"


@dataclass
class WorkflowOutcome:
    states: List[WorkflowState] = field(default_factory=list)
    bundle: Optional[ProofBundle] = None
    verified: Optional[bool] = None

    @property
    def state(self) -> Optional[WorkflowState]:
        return self.states[-1] if self.states else None

    @property
    def terminal(self) -> Optional[WorkflowState]:
        """Last state before DONE: the branch that was actually taken."""
        return self.states[-2] if len(self.states) >= 2 else None


def render_proof(bundle: ProofBundle) -> str:
    return msgspec.json.format(msgspec.json.encode(bundle.proof_dict()), indent=1).decode("utf-8")


def render_public_signals(circuit: CircuitSpec, bundle: ProofBundle) -> str:
    values = ",".join(bundle.public_signals)
    names = ",".join(circuit.outputs)
    return f"Public signals: {names} = {values}" if names else f"Public signals: {values}"


class WorkflowController:
    def __init__(
        self,
        config: WorkflowConfig,
        circuit: CircuitSpec,
        prover: ProvingEngine,
        verifier: VerificationEngine,
        *,
        prompt: PromptFn,
        echo: EchoFn,
    ):
        self.config = config
        self.circuit = circuit
        self.paths = config.artifacts()
        self.prover = prover
        self.verifier = verifier
        self._prompt = prompt
        self._echo = echo
        self.collector = WitnessCollector(circuit, prompt)

    def run(self) -> WorkflowOutcome:
        outcome = WorkflowOutcome()
        with run_scope():
            self._step(outcome, WorkflowState.COLLECTING_INPUTS)
            witness = self.collector.collect()

            self._step(outcome, WorkflowState.PROVING)
            result = self.prover.full_prove(witness, self.paths.wasm, self.paths.zkey)

            if not result.ok:
                err = result.error
                log.info(
                    "proof generation failed",
                    extra={"code": err.to_dict()["code"], "detail": err.ctx},
                )
                self._step(outcome, WorkflowState.PROOF_FAILED)
                self._echo(MSG_PROOF_FAILED)
                return self._done(outcome)

            bundle = result.bundle
            outcome.bundle = bundle
            self._step(outcome, WorkflowState.PROOF_SUCCEEDED)
            self._echo("Proof: ")
            self._echo(render_proof(bundle))
            self._echo(render_public_signals(self.circuit, bundle))
            if self.config.export_dir is not None:
                self._export(bundle, self.config.export_dir)

            if self._prompt(VERIFY_PROMPT) != AFFIRMATIVE:
                self._step(outcome, WorkflowState.SKIPPED)
                return self._done(outcome)

            self._step(outcome, WorkflowState.VERIFYING)
            vkey = load_verification_key(self.paths.verification_key)
            ok = self.verifier.verify(vkey, bundle.public_signals, bundle.proof) is True
            outcome.verified = ok
            if ok:
                self._step(outcome, WorkflowState.VERIFICATION_PASSED)
                self._echo(MSG_VERIFIED)
            else:
                self._step(outcome, WorkflowState.VERIFICATION_FAILED)
                self._echo(MSG_INVALID)
            return self._done(outcome)

    def _step(self, outcome: WorkflowOutcome, state: WorkflowState) -> None:
        outcome.states.append(state)
        log.debug("state -> %s", state.value)

    def _done(self, outcome: WorkflowOutcome) -> WorkflowOutcome:
        self._step(outcome, WorkflowState.DONE)
        return outcome

    def _export(self, bundle: ProofBundle, directory: Path) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        (directory / "proof.json").write_bytes(msgspec.json.encode(bundle.proof_dict()) + b"\n")
        (directory / "public.json").write_bytes(
            msgspec.json.encode(list(bundle.public_signals)) + b"\n"
        )
        log.info("proof exported", extra={"dir": str(directory)})


__all__ = [
    "AFFIRMATIVE",
    "MSG_INVALID",
    "MSG_PROOF_FAILED",
    "MSG_VERIFIED",
    "VERIFY_PROMPT",
    "WorkflowController",
    "WorkflowOutcome",
    "WorkflowState",
    "render_proof",
    "render_public_signals",
]
