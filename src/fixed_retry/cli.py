from __future__ import annotations

import argparse
import json
import logging
import subprocess
import sys
from pathlib import Path
from typing import Any, NoReturn, Sequence

from .exceptions import CommandFailedError, FixedRetryError, NonRetryableCommandError
from .executor import execute
from .logging_config import configure_logging
from .policy import RetryPolicy

SCHEMA_VERSION = "1"

logger = logging.getLogger(__name__)


class JsonArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise ValueError(message)


def _final_exit_code(value: str) -> int:
    code = int(value)
    if code == 0:
        raise argparse.ArgumentTypeError("exit code 0 means success and cannot be final")
    return code


def _read_policy_file(policy_file: str) -> dict[str, Any]:
    loaded = json.loads(Path(policy_file).read_text(encoding="utf-8"))
    if not isinstance(loaded, dict):
        raise ValueError("policy-file must contain a JSON object")
    return loaded


def _guess_command(argv: Sequence[str] | None) -> str | None:
    if not argv:
        return None
    for token in argv:
        if token.startswith("-"):
            continue
        return token
    return None


def _success_payload(command: str, data: dict[str, Any]) -> dict[str, Any]:
    return {
        "ok": True,
        "schema_version": SCHEMA_VERSION,
        "command": command,
        "data": data,
    }


def _error_payload(
    command: str | None,
    error_type: str,
    message: str,
) -> dict[str, Any]:
    return {
        "ok": False,
        "schema_version": SCHEMA_VERSION,
        "command": command,
        "error": {
            "type": error_type,
            "message": message,
        },
    }


def _create_parser() -> argparse.ArgumentParser:
    parser = JsonArgumentParser(prog="fixed-retry")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run", help="Run a command, retrying it at a fixed interval on failure"
    )
    run_parser.add_argument("--interval-ms", type=int)
    run_parser.add_argument("--max-attempts", type=int)
    run_parser.add_argument("--policy-file")
    run_parser.add_argument(
        "--non-retryable-exit-code", type=_final_exit_code, action="append", default=[]
    )
    run_parser.add_argument("--on-retry")
    run_parser.add_argument("--log-level", default="WARNING")
    run_parser.add_argument("argv", nargs=argparse.REMAINDER)

    return parser


def _resolve_policy(args: argparse.Namespace) -> RetryPolicy:
    payload = _read_policy_file(args.policy_file) if args.policy_file else {}
    if args.interval_ms is not None:
        payload["interval_ms"] = args.interval_ms
    if args.max_attempts is not None:
        payload["max_attempts"] = args.max_attempts
    return RetryPolicy.from_mapping(payload)


def _strip_separator(argv: list[str]) -> list[str]:
    if argv and argv[0] == "--":
        return argv[1:]
    return argv


def _run(args: argparse.Namespace) -> dict[str, Any]:
    if args.command == "run":
        argv = _strip_separator(list(args.argv))
        if not argv:
            raise ValueError("Provide a command to run after --.")
        policy = _resolve_policy(args)
        final_codes = set(args.non_retryable_exit_code)
        attempts = {"count": 0}

        def _attempt() -> subprocess.CompletedProcess[str]:
            attempts["count"] += 1
            try:
                completed = subprocess.run(argv, capture_output=True, text=True)
            except FileNotFoundError as exc:
                raise NonRetryableCommandError(argv, 127) from exc
            if completed.returncode in final_codes:
                raise NonRetryableCommandError(argv, completed.returncode)
            if completed.returncode != 0:
                raise CommandFailedError(argv, completed.returncode)
            return completed

        def _on_retry() -> None:
            completed = subprocess.run(
                args.on_retry, shell=True, capture_output=True, text=True
            )
            if completed.stdout or completed.stderr:
                logger.info(
                    "on-retry output: %s", (completed.stdout + completed.stderr).strip()
                )
            if completed.returncode != 0:
                raise CommandFailedError(args.on_retry, completed.returncode)

        completed = execute(_attempt, policy, _on_retry if args.on_retry else None)
        return {
            "argv": argv,
            "returncode": completed.returncode,
            "attempts": attempts["count"],
            "policy": policy.to_dict(),
            "stdout": completed.stdout,
            "stderr": completed.stderr,
        }

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    raw_argv: Sequence[str] = argv if argv is not None else sys.argv[1:]
    parser = _create_parser()
    command = _guess_command(raw_argv)

    try:
        args = parser.parse_args(raw_argv)
    except ValueError as exc:
        print(
            json.dumps(
                _error_payload(command, "ArgumentError", str(exc)),
                ensure_ascii=False,
            )
        )
        return 2

    command = args.command
    configure_logging(args.log_level)

    try:
        payload = _success_payload(command, _run(args))
    except FixedRetryError as exc:
        print(
            json.dumps(
                _error_payload(command, type(exc).__name__, str(exc)),
                ensure_ascii=False,
            )
        )
        return 1
    except Exception as exc:
        print(
            json.dumps(
                _error_payload(command, type(exc).__name__, str(exc)),
                ensure_ascii=False,
            )
        )
        return 1

    print(json.dumps(payload, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
