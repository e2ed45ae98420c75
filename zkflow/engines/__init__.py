"""
zkflow.engines: proving / verification backends

The workflow talks to two collaborators through narrow contracts:

    ProvingEngine.full_prove(witness, circuit_program, proving_key) -> ProveResult
    VerificationEngine.verify(verification_key, public_signals, proof) -> bool

``full_prove`` never raises for an unusable witness or missing artifacts; it
returns ``ProveResult.failure(...)``. ``verify`` is a pure function of its
three arguments.

Backends are loaded lazily by name:

- proving:      "snarkjs"
- verification: "pyecc" (in-process, default), "snarkjs"
"""

from __future__ import annotations

from importlib import import_module
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from ..config import WorkflowConfig, backend_name
from ..errors import ConfigError
from ..types import ProveResult
from ..witness import Witness


@runtime_checkable
class ProvingEngine(Protocol):
    def full_prove(
        self, witness: Witness, circuit_program: Path, proving_key: Path
    ) -> ProveResult: ...


@runtime_checkable
class VerificationEngine(Protocol):
    def verify(
        self,
        verification_key: Mapping[str, Any],
        public_signals: Sequence[Any],
        proof: Mapping[str, Any],
    ) -> bool: ...


def _import(name: str):
    return import_module(f".{name}", __name__)


def _driver(config: WorkflowConfig):
    mod = _import("snarkjs")
    return mod.SnarkjsDriver(node_bin=config.node_bin, snarkjs_module=config.snarkjs_module)


def get_proving_engine(name: str, config: WorkflowConfig) -> ProvingEngine:
    key = backend_name(name)
    if key == "snarkjs":
        return _import("snarkjs").SnarkjsProvingEngine(_driver(config))
    raise ConfigError(f"unsupported proving engine {name!r}", supported=["snarkjs"])


def get_verification_engine(name: str, config: WorkflowConfig) -> VerificationEngine:
    key = backend_name(name)
    if key == "pyecc":
        return _import("groth16").PyEccVerificationEngine()
    if key == "snarkjs":
        return _import("snarkjs").SnarkjsVerificationEngine(_driver(config))
    raise ConfigError(f"unsupported verification engine {name!r}", supported=["pyecc", "snarkjs"])


__all__ = [
    "ProvingEngine",
    "VerificationEngine",
    "get_proving_engine",
    "get_verification_engine",
]
