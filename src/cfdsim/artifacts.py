"""Result artifacts.

Writes a ResultSet as canonical JSON next to its SHA256 digest so a run can
be compared against a later one byte for byte.
"""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - used at runtime in write_outputs
from typing import TYPE_CHECKING

import orjson

if TYPE_CHECKING:
    from cfdsim.contracts import ResultSet

RESULTS_FILENAME = "results.json"
SHA256_FILENAME = "sha256.txt"


def dump_result_json(result: ResultSet) -> bytes:
    """Dump a ResultSet to canonical JSON bytes.

    Args:
        result: ResultSet to dump.

    Returns:
        JSON bytes with sorted keys and Decimals as strings (deterministic).
    """
    return orjson.dumps(
        result.model_dump(mode="json"),
        option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2,
    )


def write_outputs(result: ResultSet, output_dir: Path) -> tuple[Path, Path]:
    """Write results.json and sha256.txt.

    Args:
        result: ResultSet from simulate().
        output_dir: Directory to write files to (created if missing).

    Returns:
        Tuple of (results_path, sha256_path).
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    results_path = output_dir / RESULTS_FILENAME
    with open(results_path, "wb") as f:
        f.write(dump_result_json(result))

    sha256_path = output_dir / SHA256_FILENAME
    with open(sha256_path, "w") as f:
        f.write(f"{result.sha256}\n")

    return results_path, sha256_path
