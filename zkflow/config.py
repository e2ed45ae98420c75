"""
zkflow configuration.

A single frozen ``WorkflowConfig`` is resolved once at startup and handed to
the workflow controller and the engine factories. Nothing in the package
reads module-level globals for artifact locations.

Environment variables (all optional; explicit overrides win):

  ZKFLOW_BUILD_DIR=build                     # artifact root
  ZKFLOW_CIRCUIT=private_multiplication      # logical circuit identifier
  ZKFLOW_PROVER=snarkjs                      # proving backend
  ZKFLOW_VERIFIER=pyecc                      # pyecc | snarkjs
  ZKFLOW_NODE=node                           # Node.js executable
  ZKFLOW_SNARKJS=snarkjs                     # module path handed to require()
  ZKFLOW_EXPORT_DIR=                         # write proof.json/public.json here

Artifact layout under ``build_dir`` (as produced by circom + snarkjs setup):

  <circuit>_js/<circuit>.wasm
  <circuit>_final.zkey
  verification_key.json
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .errors import ConfigError

DEFAULT_BUILD_DIR = "build"
DEFAULT_CIRCUIT = "private_multiplication"
DEFAULT_PROVER = "snarkjs"
DEFAULT_VERIFIER = "pyecc"

PROVERS = ("snarkjs",)
VERIFIERS = ("pyecc", "snarkjs")
_BACKEND_ALIASES = {"py_ecc": "pyecc"}


def backend_name(name: str) -> str:
    """Canonical backend key: case-insensitive, '-' and '_' interchangeable."""
    key = name.strip().lower().replace("-", "_")
    return _BACKEND_ALIASES.get(key, key)


def _getenv(key: str, default: Optional[str] = None) -> Optional[str]:
    v = os.environ.get(key)
    return v if v is not None and v.strip() != "" else default


@dataclass(frozen=True)
class ArtifactPaths:
    """Where the compiled circuit, proving key and verification key live."""

    wasm: Path
    zkey: Path
    verification_key: Path

    @classmethod
    def for_circuit(cls, build_dir: Path, circuit_name: str) -> "ArtifactPaths":
        return cls(
            wasm=build_dir / f"{circuit_name}_js" / f"{circuit_name}.wasm",
            zkey=build_dir / f"{circuit_name}_final.zkey",
            verification_key=build_dir / "verification_key.json",
        )

    def items(self) -> Iterable[tuple[str, Path]]:
        return (
            ("wasm", self.wasm),
            ("zkey", self.zkey),
            ("verification_key", self.verification_key),
        )

    def missing(self) -> List[str]:
        """Names of artifacts that do not exist on disk."""
        return [name for name, p in self.items() if not p.is_file()]


@dataclass(frozen=True)
class WorkflowConfig:
    build_dir: Path = Path(DEFAULT_BUILD_DIR)
    circuit_name: str = DEFAULT_CIRCUIT
    prover: str = DEFAULT_PROVER
    verifier: str = DEFAULT_VERIFIER
    node_bin: str = "node"
    snarkjs_module: str = "snarkjs"
    export_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "prover", backend_name(self.prover))
        object.__setattr__(self, "verifier", backend_name(self.verifier))
        if not self.circuit_name or "/" in self.circuit_name or "\\" in self.circuit_name:
            raise ConfigError("circuit name must be a bare identifier", circuit=self.circuit_name)
        if self.prover not in PROVERS:
            raise ConfigError(f"unknown prover {self.prover!r}", supported=list(PROVERS))
        if self.verifier not in VERIFIERS:
            raise ConfigError(f"unknown verifier {self.verifier!r}", supported=list(VERIFIERS))

    def artifacts(self) -> ArtifactPaths:
        return ArtifactPaths.for_circuit(self.build_dir, self.circuit_name)

    def with_overrides(self, **overrides: Any) -> "WorkflowConfig":
        clean = {k: v for k, v in overrides.items() if v is not None}
        for key in ("build_dir", "export_dir"):
            if key in clean:
                clean[key] = Path(clean[key])
        return replace(self, **clean)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["build_dir"] = str(self.build_dir)
        d["export_dir"] = str(self.export_dir) if self.export_dir else None
        return d


def load_config(**overrides: Any) -> WorkflowConfig:
    """
    Build a config from defaults, then environment, then explicit keyword
    overrides (``None`` values are ignored so CLI options can pass through).
    """
    export_env = _getenv("ZKFLOW_EXPORT_DIR")
    base = WorkflowConfig(
        build_dir=Path(_getenv("ZKFLOW_BUILD_DIR", DEFAULT_BUILD_DIR)),  # type: ignore[arg-type]
        circuit_name=_getenv("ZKFLOW_CIRCUIT", DEFAULT_CIRCUIT),  # type: ignore[arg-type]
        prover=_getenv("ZKFLOW_PROVER", DEFAULT_PROVER),  # type: ignore[arg-type]
        verifier=_getenv("ZKFLOW_VERIFIER", DEFAULT_VERIFIER),  # type: ignore[arg-type]
        node_bin=_getenv("ZKFLOW_NODE", "node"),  # type: ignore[arg-type]
        snarkjs_module=_getenv("ZKFLOW_SNARKJS", "snarkjs"),  # type: ignore[arg-type]
        export_dir=Path(export_env) if export_env else None,
    )
    return base.with_overrides(**overrides)


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1 << 20), b""):
            h.update(chunk)
    return h.hexdigest()


__all__ = [
    "ArtifactPaths",
    "WorkflowConfig",
    "backend_name",
    "load_config",
    "sha256_file",
    "DEFAULT_BUILD_DIR",
    "DEFAULT_CIRCUIT",
    "PROVERS",
    "VERIFIERS",
]
