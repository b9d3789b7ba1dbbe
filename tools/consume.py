#!/usr/bin/env python3
"""Consume call fixtures (JSON or YAML) and validate them against the specs."""

from __future__ import annotations

import glob
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

import click

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT / "tools"))

from covenant_spec.encoding import decode_transaction, encode_transaction  # noqa: E402
from covenant_spec.state_transition import apply_call  # noqa: E402
from fixtures_io import (  # noqa: E402
    ToolConfig,
    call_from_json,
    state_from_json,
    state_to_json,
    tx_from_json,
)
from yaml_dump import read_yaml  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def find_fixture_files(fixture_dir: str) -> list[str]:
    patterns = [
        os.path.join(fixture_dir, "**", "*.json"),
        os.path.join(fixture_dir, "**", "*.yaml"),
        os.path.join(fixture_dir, "**", "*.yml"),
    ]
    files: list[str] = []
    for pattern in patterns:
        files.extend(glob.glob(pattern, recursive=True))
    return sorted(files)


def _load(path: Path) -> Any:
    if path.suffix in (".yaml", ".yml"):
        return read_yaml(path)
    return json.loads(path.read_text())


def check_case(case: dict[str, Any]) -> Optional[str]:
    """Replay one case; return a failure label or None."""
    state = state_from_json(case["contract"])
    successor, result = apply_call(
        state,
        call_from_json(case["call"]),
        tx_from_json(case["tx"]),
        case["input_index"],
        case["value"],
    )

    expected = case["expected"]
    if result.ok != expected["ok"]:
        return "ok_mismatch"
    actual_err = result.error.code.name if result.error else None
    if actual_err != expected["error"]:
        return "error_mismatch"
    if state_to_json(successor) != expected.get("successor"):
        return "successor_mismatch"
    return None


def check_wire_vector(vec: dict[str, Any]) -> Optional[str]:
    tx = tx_from_json(vec["tx"])
    if encode_transaction(tx).hex() != vec["expected_hex"]:
        return "wire_mismatch"
    if decode_transaction(bytes.fromhex(vec["expected_hex"])) != tx:
        return "decode_mismatch"
    return None


def check_file(path: Path, stop_on_failure: bool) -> tuple[int, list[str]]:
    data = _load(path)
    if not isinstance(data, dict):
        return 0, []
    if "vectors" in data:
        cases, check = data["vectors"], check_wire_vector
    else:
        cases, check = data.get("cases", []), check_case
    failures: list[str] = []
    for case in cases:
        label = check(case)
        if label is None:
            logger.debug(f"[PASS] {case['name']}")
            continue
        logger.warning(f"[FAIL] {path.name}: {case['name']}: {label}")
        failures.append(f"{case['name']}: {label}")
        if stop_on_failure:
            break
    return len(cases), failures


@click.command()
@click.option(
    "--fixtures",
    default=None,
    help="Path to fixtures directory or a specific JSON/YAML file",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--stop-on-failure",
    is_flag=True,
    help="Stop on first failing case",
)
def main(fixtures: Optional[str], verbose: bool, stop_on_failure: bool) -> None:
    """Replay covenant call fixtures."""
    config = ToolConfig.from_env()
    if fixtures:
        config.fixtures_dir = fixtures
    if verbose:
        config.verbose = True
    if stop_on_failure:
        config.stop_on_first_failure = True
    if config.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if os.path.isfile(config.fixtures_dir):
        files = [config.fixtures_dir]
    else:
        files = find_fixture_files(config.fixtures_dir)
    if not files:
        logger.error(f"No fixture files found in {config.fixtures_dir}")
        sys.exit(1)

    total = 0
    failures: list[str] = []
    for name in files:
        count, file_failures = check_file(Path(name), config.stop_on_first_failure)
        total += count
        failures.extend(file_failures)
        if file_failures and config.stop_on_first_failure:
            break

    logger.info(f"{total - len(failures)}/{total} cases passed across {len(files)} files")
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
