"""
Typed exceptions for zkflow.

Two failure channels are kept apart on purpose:

- ``ProofGenerationError`` is a *domain* failure. Proving engines never raise
  it; they return it inside a ``ProveResult`` and the workflow consumes it
  locally (the user sees a single generic message).
- ``VerificationKeyError`` / ``EngineError`` are *fatal*. They are raised and
  allowed to propagate up to the process boundary.

Every error is structured: a stable machine code, a human message, a small
context dict and an optional underlying cause.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ZKFlowErrorCode(str, Enum):
    """Canonical error codes."""

    UNKNOWN = "UNKNOWN"

    # Proving step (recoverable)
    INVALID_WITNESS = "INVALID_WITNESS"  # non-numeric / out-of-field input
    PROVER_REJECTED = "PROVER_REJECTED"  # engine ran and refused the witness
    ARTIFACT_MISSING = "ARTIFACT_MISSING"  # wasm / zkey not found
    ENGINE_UNAVAILABLE = "ENGINE_UNAVAILABLE"  # node / snarkjs not installed

    # Verification step (fatal)
    VKEY_UNREADABLE = "VKEY_UNREADABLE"
    VKEY_MALFORMED = "VKEY_MALFORMED"
    ENGINE_FAILURE = "ENGINE_FAILURE"

    CONFIG = "CONFIG"


@dataclass
class ZKFlowError(Exception):
    """
    Base structured error.

    Fields:
      code:  stable machine code (ZKFlowErrorCode | str)
      msg:   human-readable summary
      ctx:   small dict of contextual fields (paths, signal names, exit codes)
      cause: optional underlying exception (not serialized)
    """

    code: ZKFlowErrorCode | str = ZKFlowErrorCode.UNKNOWN
    msg: str = "zkflow error"
    ctx: Dict[str, Any] = field(default_factory=dict)
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        if not isinstance(self.ctx, dict):
            self.ctx = {"_ctx_type_error": str(type(self.ctx)), "repr": repr(self.ctx)}

    def __str__(self) -> str:
        parts = [f"[{_code_str(self.code)}] {self.msg}"]
        if self.ctx:
            parts.append(f"ctx={self.ctx}")
        if self.cause:
            parts.append(f"cause={self.cause!r}")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": _code_str(self.code), "msg": self.msg, "ctx": self.ctx}

    @classmethod
    def wrap(
        cls,
        code: ZKFlowErrorCode | str,
        msg: str,
        *,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> "ZKFlowError":
        return cls(code=code, msg=msg, ctx=dict(ctx or {}), cause=cause)


def _code_str(code: ZKFlowErrorCode | str) -> str:
    return code.value if isinstance(code, ZKFlowErrorCode) else str(code)


class ProofGenerationError(ZKFlowError):
    """The witness could not be turned into a proof (returned, not raised)."""

    def __init__(
        self,
        msg: str = "proof generation failed",
        *,
        code: ZKFlowErrorCode | str = ZKFlowErrorCode.PROVER_REJECTED,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(code=code, msg=msg, ctx=dict(ctx or {}), cause=cause)


class VerificationKeyError(ZKFlowError):
    """The verification key could not be read or parsed. Fatal."""

    def __init__(
        self,
        msg: str = "verification key could not be loaded",
        *,
        path: Optional[str] = None,
        code: ZKFlowErrorCode | str = ZKFlowErrorCode.VKEY_UNREADABLE,
        cause: Optional[BaseException] = None,
    ) -> None:
        ctx: Dict[str, Any] = {}
        if path is not None:
            ctx["path"] = path
        super().__init__(code=code, msg=msg, ctx=ctx, cause=cause)


class EngineError(ZKFlowError):
    """An engine crashed outside the recoverable proving step. Fatal."""

    def __init__(
        self,
        msg: str = "engine failure",
        *,
        engine: Optional[str] = None,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        base_ctx: Dict[str, Any] = {}
        if engine is not None:
            base_ctx["engine"] = engine
        if ctx:
            base_ctx.update(ctx)
        super().__init__(
            code=ZKFlowErrorCode.ENGINE_FAILURE, msg=msg, ctx=base_ctx, cause=cause
        )


class ConfigError(ZKFlowError):
    """Invalid configuration value or unknown backend name."""

    def __init__(self, msg: str = "invalid configuration", **ctx: Any) -> None:
        super().__init__(code=ZKFlowErrorCode.CONFIG, msg=msg, ctx=ctx)


__all__ = [
    "ZKFlowErrorCode",
    "ZKFlowError",
    "ProofGenerationError",
    "VerificationKeyError",
    "EngineError",
    "ConfigError",
]
