"""
zkflow.engines.snarkjs
======================

Proving and verification backed by SnarkJS running under Node.js.

A small JS driver is written to a temporary directory and executed as

    node snarkjs_driver.js '<json-args>'

with ``mode`` = "prove" (``snarkjs.groth16.fullProve``) or "verify"
(``snarkjs.groth16.verify``). All data crosses the process boundary as JSON
files in the same temporary directory; nothing is kept after the call.

Prereqs: ``node`` on PATH (or ``ZKFLOW_NODE``) and a ``snarkjs`` module. The
driver lives in a temp dir, so ``require`` cannot see a project-local
``node_modules``; it resolves, in order:

- ``ZKFLOW_SNARKJS`` (module name or absolute path) through ``NODE_PATH``
- the global npm root (``npm root -g``), i.e. ``npm i -g snarkjs``
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence

import msgspec

from ..errors import EngineError, ProofGenerationError, ZKFlowErrorCode
from ..types import ProofBundle, ProveResult
from ..witness import Witness

log = logging.getLogger(__name__)

JS_DRIVER = r"""#!/usr/bin/env node
/* zkflow snarkjs driver.
   Args: JSON in argv[2]:
     { mode: "prove",  snarkjs, input, wasm, zkey, proof_out, public_out }
     { mode: "verify", snarkjs, vk, proof, public }
   "verify" prints {"ok": <bool>} on stdout.
*/
const fs = require('fs');
const path = require('path');

function loadSnarkjs(name) {
  try {
    return require(name);
  } catch (e) {
    if (e.code !== 'MODULE_NOT_FOUND' || path.isAbsolute(name)) throw e;
    const root = require('child_process').execSync('npm root -g', { encoding: 'utf8' }).trim();
    return require(path.join(root, name));
  }
}

async function main() {
  if (process.argv.length < 3) {
    console.error("usage: driver <json-args>");
    process.exit(2);
  }
  const cfg = JSON.parse(process.argv[2]);
  const snarkjs = loadSnarkjs(cfg.snarkjs || 'snarkjs');

  if (cfg.mode === "prove") {
    const input = JSON.parse(fs.readFileSync(cfg.input, 'utf8'));
    const { proof, publicSignals } = await snarkjs.groth16.fullProve(input, cfg.wasm, cfg.zkey);
    fs.writeFileSync(cfg.proof_out, JSON.stringify(proof));
    fs.writeFileSync(cfg.public_out, JSON.stringify(publicSignals));
    return;
  }

  if (cfg.mode === "verify") {
    const vk = JSON.parse(fs.readFileSync(cfg.vk, 'utf8'));
    const proof = JSON.parse(fs.readFileSync(cfg.proof, 'utf8'));
    const publicSignals = JSON.parse(fs.readFileSync(cfg.public, 'utf8'));
    const ok = await snarkjs.groth16.verify(vk, publicSignals, proof);
    process.stdout.write(JSON.stringify({ ok: ok === true }) + "\n");
    return;
  }

  throw new Error("Unknown mode: " + cfg.mode);
}

// snarkjs keeps worker threads alive; exit explicitly.
main().then(() => process.exit(0)).catch(e => {
  console.error(e && e.message ? e.message : e);
  process.exit(1);
});
"""


_MODULE_MISSING = "Cannot find module"


def _tail(text: str, n: int = 400) -> str:
    text = (text or "").strip()
    return text if len(text) <= n else "..." + text[-n:]


class SnarkjsDriver:
    """Runs the embedded JS driver; one subprocess per call."""

    def __init__(self, node_bin: str = "node", snarkjs_module: str = "snarkjs"):
        self.node_bin = node_bin
        self.snarkjs_module = snarkjs_module

    def run(self, workdir: Path, args: Dict[str, Any]) -> subprocess.CompletedProcess:
        driver = workdir / "snarkjs_driver.js"
        driver.write_text(JS_DRIVER, encoding="utf-8")
        payload = {**args, "snarkjs": self.snarkjs_module}
        cmd = [self.node_bin, str(driver), msgspec.json.encode(payload).decode("utf-8")]
        log.debug("exec %s mode=%s", self.node_bin, args.get("mode"))
        return subprocess.run(cmd, capture_output=True, text=True, cwd=str(workdir))


class SnarkjsProvingEngine:
    """ProvingEngine backed by ``snarkjs.groth16.fullProve``."""

    name = "snarkjs"

    def __init__(self, driver: SnarkjsDriver):
        self.driver = driver

    def full_prove(self, witness: Witness, circuit_program: Path, proving_key: Path) -> ProveResult:
        bad = witness.invalid_signals()
        if bad:
            return ProveResult.failure(
                ProofGenerationError(
                    "witness values are not field elements",
                    code=ZKFlowErrorCode.INVALID_WITNESS,
                    ctx={"signals": bad},
                )
            )
        missing = [str(p) for p in (circuit_program, proving_key) if not Path(p).is_file()]
        if missing:
            return ProveResult.failure(
                ProofGenerationError(
                    "circuit artifacts not found",
                    code=ZKFlowErrorCode.ARTIFACT_MISSING,
                    ctx={"missing": missing},
                )
            )

        with tempfile.TemporaryDirectory(prefix="zkflow-") as td:
            tmp = Path(td)
            input_path = tmp / "input.json"
            input_path.write_bytes(msgspec.json.encode(witness.to_input_json()))
            try:
                proc = self.driver.run(
                    tmp,
                    {
                        "mode": "prove",
                        "input": str(input_path),
                        "wasm": str(Path(circuit_program).resolve()),
                        "zkey": str(Path(proving_key).resolve()),
                        "proof_out": str(tmp / "proof.json"),
                        "public_out": str(tmp / "public.json"),
                    },
                )
            except OSError as e:
                return ProveResult.failure(
                    ProofGenerationError(
                        "node is not available",
                        code=ZKFlowErrorCode.ENGINE_UNAVAILABLE,
                        ctx={"node": self.driver.node_bin},
                        cause=e,
                    )
                )
            if proc.returncode != 0 and _MODULE_MISSING in (proc.stderr or ""):
                log.warning("snarkjs module not found; set ZKFLOW_SNARKJS or NODE_PATH")
                return ProveResult.failure(
                    ProofGenerationError(
                        "snarkjs is not installed",
                        code=ZKFlowErrorCode.ENGINE_UNAVAILABLE,
                        ctx={"snarkjs": self.driver.snarkjs_module, "stderr": _tail(proc.stderr)},
                    )
                )
            if proc.returncode != 0:
                return ProveResult.failure(
                    ProofGenerationError(
                        "snarkjs rejected the witness",
                        code=ZKFlowErrorCode.PROVER_REJECTED,
                        ctx={"exit_code": proc.returncode, "stderr": _tail(proc.stderr)},
                    )
                )
            try:
                proof = msgspec.json.decode((tmp / "proof.json").read_bytes())
                public = msgspec.json.decode((tmp / "public.json").read_bytes())
            except (OSError, msgspec.DecodeError) as e:
                return ProveResult.failure(
                    ProofGenerationError(
                        "snarkjs produced no readable proof",
                        code=ZKFlowErrorCode.PROVER_REJECTED,
                        cause=e,
                    )
                )
        return ProveResult.success(ProofBundle.from_json(proof, public))


class SnarkjsVerificationEngine:
    """VerificationEngine backed by ``snarkjs.groth16.verify``."""

    name = "snarkjs"

    def __init__(self, driver: SnarkjsDriver):
        self.driver = driver

    def verify(
        self,
        verification_key: Mapping[str, Any],
        public_signals: Sequence[Any],
        proof: Mapping[str, Any],
    ) -> bool:
        with tempfile.TemporaryDirectory(prefix="zkflow-") as td:
            tmp = Path(td)
            files = {
                "vk": (tmp / "verification_key.json", dict(verification_key)),
                "proof": (tmp / "proof.json", dict(proof)),
                "public": (tmp / "public.json", list(public_signals)),
            }
            for path, doc in files.values():
                path.write_bytes(msgspec.json.encode(doc))
            try:
                proc = self.driver.run(
                    tmp, {"mode": "verify", **{k: str(p) for k, (p, _) in files.items()}}
                )
            except OSError as e:
                raise EngineError("node is not available", engine=self.name, cause=e) from e
        if proc.returncode != 0:
            raise EngineError(
                "snarkjs verifier crashed",
                engine=self.name,
                ctx={"exit_code": proc.returncode, "stderr": _tail(proc.stderr)},
            )
        try:
            result = msgspec.json.decode(proc.stdout.strip().splitlines()[-1])
        except (IndexError, msgspec.DecodeError) as e:
            raise EngineError("unexpected verifier output", engine=self.name, cause=e) from e
        return isinstance(result, dict) and result.get("ok") is True


__all__ = [
    "JS_DRIVER",
    "SnarkjsDriver",
    "SnarkjsProvingEngine",
    "SnarkjsVerificationEngine",
]
