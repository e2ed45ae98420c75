"""
zkflow: interactive Groth16 proof workflow

Collects the private inputs of a fixed circuit, asks a proving engine for a
proof, prints it with its public signals and optionally verifies it against
the circuit's verification key.

>>> from zkflow import load_config, WorkflowController
>>> config = load_config(build_dir="build")
"""

from __future__ import annotations

from .circuit import FIELD_MODULUS, PRIVATE_MULTIPLICATION, CircuitSpec, get_circuit
from .config import ArtifactPaths, WorkflowConfig, load_config
from .errors import (
    ConfigError,
    EngineError,
    ProofGenerationError,
    VerificationKeyError,
    ZKFlowError,
    ZKFlowErrorCode,
)
from .types import ProofBundle, ProveResult
from .version import __version__
from .witness import NOT_A_NUMBER, Witness, WitnessCollector, parse_signal_value
from .workflow import WorkflowController, WorkflowOutcome, WorkflowState

__all__ = [
    "__version__",
    "FIELD_MODULUS",
    "PRIVATE_MULTIPLICATION",
    "CircuitSpec",
    "get_circuit",
    "ArtifactPaths",
    "WorkflowConfig",
    "load_config",
    "ZKFlowError",
    "ZKFlowErrorCode",
    "ProofGenerationError",
    "VerificationKeyError",
    "EngineError",
    "ConfigError",
    "ProofBundle",
    "ProveResult",
    "NOT_A_NUMBER",
    "Witness",
    "WitnessCollector",
    "parse_signal_value",
    "WorkflowController",
    "WorkflowOutcome",
    "WorkflowState",
]
