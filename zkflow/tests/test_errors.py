from __future__ import annotations

from zkflow.errors import (
    ConfigError,
    EngineError,
    ProofGenerationError,
    VerificationKeyError,
    ZKFlowError,
    ZKFlowErrorCode,
)


def test_to_dict_uses_plain_code_strings():
    err = ProofGenerationError("bad witness", code=ZKFlowErrorCode.INVALID_WITNESS, ctx={"signals": ["a"]})
    assert err.to_dict() == {"code": "INVALID_WITNESS", "msg": "bad witness", "ctx": {"signals": ["a"]}}
    assert str(err).startswith("[INVALID_WITNESS] bad witness")


def test_wrap_keeps_cause():
    cause = OSError("disk")
    err = ZKFlowError.wrap("CUSTOM", "wrapped", ctx={"k": 1}, cause=cause)
    assert err.code == "CUSTOM"
    assert err.cause is cause
    assert "cause=OSError('disk')" in str(err)


def test_subclass_defaults():
    assert VerificationKeyError(path="vk.json").ctx == {"path": "vk.json"}
    assert VerificationKeyError().code == ZKFlowErrorCode.VKEY_UNREADABLE
    eng = EngineError("crashed", engine="snarkjs", ctx={"exit_code": 1})
    assert eng.code == ZKFlowErrorCode.ENGINE_FAILURE
    assert eng.ctx == {"engine": "snarkjs", "exit_code": 1}
    assert ConfigError("nope", supported=["pyecc"]).ctx == {"supported": ["pyecc"]}


def test_errors_are_exceptions():
    for err in (ProofGenerationError(), VerificationKeyError(), EngineError(), ConfigError()):
        assert isinstance(err, ZKFlowError)
        assert isinstance(err, Exception)
