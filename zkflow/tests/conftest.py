from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from zkflow.circuit import PRIVATE_MULTIPLICATION
from zkflow.config import WorkflowConfig
from zkflow.tests import (
    EchoCapture,
    Groth16Simulator,
    RecordingVerifier,
    ScriptedPrompt,
    SimulatedProvingEngine,
)
from zkflow.workflow import WorkflowController

_ENV_KEYS = (
    "ZKFLOW_BUILD_DIR",
    "ZKFLOW_CIRCUIT",
    "ZKFLOW_PROVER",
    "ZKFLOW_VERIFIER",
    "ZKFLOW_NODE",
    "ZKFLOW_SNARKJS",
    "ZKFLOW_EXPORT_DIR",
    "ZKFLOW_LOG_LEVEL",
    "ZKFLOW_LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for k in _ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


@pytest.fixture(autouse=True)
def _reset_zkflow_logger():
    yield
    logger = logging.getLogger("zkflow")
    for h in list(logger.handlers):
        if h.get_name() == "zkflow-console":
            logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture(scope="session")
def sim() -> Groth16Simulator:
    return Groth16Simulator(n_public=1)


@pytest.fixture(scope="session")
def vk_json(sim) -> dict:
    return sim.verification_key()


@pytest.fixture
def build_dir(tmp_path: Path, vk_json) -> Path:
    """A build directory with a verification key (wasm/zkey are not needed by fakes)."""
    d = tmp_path / "build"
    d.mkdir()
    (d / "verification_key.json").write_text(json.dumps(vk_json), encoding="utf-8")
    return d


@pytest.fixture
def config(build_dir: Path) -> WorkflowConfig:
    return WorkflowConfig(build_dir=build_dir)


@pytest.fixture
def echo() -> EchoCapture:
    return EchoCapture()


@pytest.fixture
def make_controller(config, sim, echo):
    def _make(answers, *, prover=None, verifier=None, cfg=None):
        prompt = ScriptedPrompt(answers)
        ctl = WorkflowController(
            cfg or config,
            PRIVATE_MULTIPLICATION,
            prover or SimulatedProvingEngine(sim),
            verifier or RecordingVerifier(True),
            prompt=prompt,
            echo=echo,
        )
        return ctl, prompt

    return _make
