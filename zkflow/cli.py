"""
zkflow.cli
==========

Command-line entrypoint.

Examples:
  python -m zkflow run                          # interactive: a, b -> proof -> verify?
  python -m zkflow run --build-dir out --verifier snarkjs
  python -m zkflow run --export ./last-proof    # also write proof.json / public.json
  python -m zkflow verify proof.json public.json --vkey build/verification_key.json
  python -m zkflow artifacts                    # where the artifacts are expected

stdout carries only prompts and results; logs go to stderr
(``--log-level``, ``--log-json`` or ZKFLOW_LOG_LEVEL / ZKFLOW_LOG_FORMAT).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import msgspec
import typer

from . import logging as zlog
from .circuit import get_circuit
from .config import WorkflowConfig, load_config, sha256_file
from .engines import get_proving_engine, get_verification_engine
from .engines.loader import is_groth16_proof, load_json_file, load_verification_key
from .errors import ConfigError, EngineError, VerificationKeyError
from .version import runtime_banner
from .workflow import MSG_INVALID, MSG_VERIFIED, VERIFY_PROMPT, WorkflowController

log = logging.getLogger(__name__)

app = typer.Typer(
    name="zkflow",
    help="Collect a witness, request a Groth16 proof and optionally verify it.",
    no_args_is_help=True,
    add_completion=False,
)


def _prompt(text: str) -> str:
    # labels carry their own trailing punctuation
    try:
        return typer.prompt(text, default="", show_default=False, prompt_suffix="")
    except typer.Abort:
        # closed stdin at the confirmation reads as "no"
        if text != VERIFY_PROMPT:
            raise
        typer.echo()
        return ""


def _echo(line: str) -> None:
    typer.echo(line)


def _die(err: Exception, code: int) -> None:
    log.error("fatal: %s", err)
    typer.echo(f"error: {err}", err=True)
    raise typer.Exit(code)


def build_controller(config: WorkflowConfig) -> WorkflowController:
    return WorkflowController(
        config,
        get_circuit(config.circuit_name),
        get_proving_engine(config.prover, config),
        get_verification_engine(config.verifier, config),
        prompt=_prompt,
        echo=_echo,
    )


def _version(value: bool) -> None:
    if value:
        typer.echo(runtime_banner())
        raise typer.Exit(0)


@app.callback()
def _main(
    version: bool = typer.Option(
        False, "--version", "-V", help="Print version and exit", is_eager=True, callback=_version
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
    log_json: Optional[bool] = typer.Option(None, "--log-json/--log-text", help="Log format on stderr"),
) -> None:
    zlog.configure(level=log_level, json_lines=log_json)


@app.command("run")
def run_cmd(
    build_dir: Optional[Path] = typer.Option(None, "--build-dir", "-b", help="Artifact root directory"),
    circuit: Optional[str] = typer.Option(None, "--circuit", "-c", help="Circuit name"),
    prover: Optional[str] = typer.Option(None, "--prover", help="Proving backend (snarkjs)"),
    verifier: Optional[str] = typer.Option(None, "--verifier", help="Verification backend (pyecc|snarkjs)"),
    export: Optional[Path] = typer.Option(None, "--export", help="Write proof.json/public.json here"),
) -> None:
    """Run one witness -> proof -> (optional) verification cycle."""
    try:
        config = load_config(
            build_dir=build_dir, circuit_name=circuit, prover=prover, verifier=verifier, export_dir=export
        )
        controller = build_controller(config)
    except ConfigError as e:
        _die(e, 2)
        return
    log.debug("config %s", config.to_dict())
    try:
        controller.run()
    except (VerificationKeyError, EngineError) as e:
        _die(e, 1)


def _read_proof_and_signals(proof_path: Path, public_path: Optional[Path]) -> Tuple[Mapping[str, Any], Any]:
    doc = load_json_file(proof_path)
    if not isinstance(doc, dict):
        raise ValueError(f"{proof_path} is not a JSON object")
    signals = doc.get("publicSignals")
    proof = doc["proof"] if isinstance(doc.get("proof"), dict) else doc
    if not is_groth16_proof(proof):
        raise ValueError(f"{proof_path} does not contain a Groth16 proof")
    if public_path is not None:
        signals = load_json_file(public_path)
    if signals is None:
        raise ValueError("no public signals: pass PUBLIC or embed publicSignals in the proof file")
    return proof, signals


@app.command("verify")
def verify_cmd(
    proof_path: Path = typer.Argument(..., help="proof.json (flat proof or {proof, publicSignals})"),
    public_path: Optional[Path] = typer.Argument(None, help="public.json"),
    vkey: Optional[Path] = typer.Option(None, "--vkey", help="Verification key (default: <build-dir>/verification_key.json)"),
    build_dir: Optional[Path] = typer.Option(None, "--build-dir", "-b"),
    verifier: Optional[str] = typer.Option(None, "--verifier", help="pyecc|snarkjs"),
) -> None:
    """Verify an exported proof with only the verification key."""
    try:
        config = load_config(build_dir=build_dir, verifier=verifier)
        engine = get_verification_engine(config.verifier, config)
    except ConfigError as e:
        _die(e, 2)
        return
    try:
        proof, signals = _read_proof_and_signals(proof_path, public_path)
    except (OSError, ValueError, msgspec.DecodeError) as e:
        _die(e, 2)
        return
    try:
        key = load_verification_key(vkey or config.artifacts().verification_key)
        ok = engine.verify(key, signals, proof) is True
    except (VerificationKeyError, EngineError) as e:
        _die(e, 1)
        return
    typer.echo(MSG_VERIFIED if ok else MSG_INVALID)
    raise typer.Exit(0 if ok else 1)


@app.command("artifacts")
def artifacts_cmd(
    build_dir: Optional[Path] = typer.Option(None, "--build-dir", "-b"),
    circuit: Optional[str] = typer.Option(None, "--circuit", "-c"),
) -> None:
    """List the artifact paths the workflow will use, with presence and sha256."""
    try:
        config = load_config(build_dir=build_dir, circuit_name=circuit)
    except ConfigError as e:
        _die(e, 2)
        return
    for name, path in config.artifacts().items():
        if path.is_file():
            typer.echo(f"{name:<17} {path}  sha256:{sha256_file(path)}")
        else:
            typer.echo(f"{name:<17} {path}  (missing)")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
