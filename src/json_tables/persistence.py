"""Reading and atomically writing table files."""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any

from json_tables.errors import IoError, MalformedData, RenameFailed, SerializationError

logger = logging.getLogger(__name__)

# Permissions for a table file that does not exist yet
DEFAULT_FILE_MODE = 0o644


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON and could never be written back
    raise ValueError(f"Invalid JSON constant: {name}")


def json_type_name(value: Any) -> str:
    """Name a decoded value by its JSON type (for error messages)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def read_records(path: Path) -> list[dict[str, Any]]:
    """Load the records stored in a table file.

    A missing file or a file holding only whitespace is an empty table.

    Raises:
        IoError: The file exists but cannot be read.
        MalformedData: The content is not a JSON array of objects.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("Table file %s does not exist, treating as empty", path)
        return []
    except UnicodeDecodeError as e:
        raise MalformedData(f"Table file {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise IoError(f"Unable to read table file {path}: {e}", path) from e

    if not content.strip():
        return []

    try:
        data = json.loads(content, parse_constant=_reject_constant)
    except ValueError as e:
        raise MalformedData(f"Invalid JSON in table file {path}: {e}") from e

    if not isinstance(data, list):
        raise MalformedData(
            f"Table file {path} must contain an array of records, found: {json_type_name(data)}"
        )
    for position, record in enumerate(data):
        if not isinstance(record, dict):
            raise MalformedData(
                f"Record {position} in table file {path} must be an object, "
                f"found: {json_type_name(record)}"
            )

    logger.debug("Loaded %d records from %s", len(data), path)
    return data


def encode_records(records: list[dict[str, Any]]) -> str:
    """Serialize records to the on-disk JSON form."""
    try:
        return json.dumps(records, indent=4, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Failed to encode records as JSON: {e}") from e


def _discard(temp_path: Path) -> None:
    """Remove a temp file left behind by a failed write."""
    try:
        temp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove temporary file %s: %s", temp_path, e)


def write_records(path: Path, records: list[dict[str, Any]]) -> None:
    """Atomically replace a table file with the given records.

    The JSON is written to a temp file beside the target, flushed to disk,
    then renamed over the target. If anything fails once the temp file
    exists, the temp file is removed and the target is left as it was.

    Raises:
        SerializationError: A record value is not representable as JSON.
        IoError: The directory or temp file could not be created or written.
        RenameFailed: The final rename failed.
    """
    payload = encode_records(records)

    directory = path.parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IoError(f"Unable to create directory {directory}: {e}", directory) from e

    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        mode = DEFAULT_FILE_MODE
    except OSError as e:
        raise IoError(f"Unable to inspect table file {path}: {e}", path) from e

    try:
        fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    except OSError as e:
        raise IoError(f"Unable to create temporary file in {directory}: {e}", directory) from e
    temp_path = Path(temp_name)

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(temp_path, mode)
    except OSError as e:
        _discard(temp_path)
        raise IoError(f"Failed to write data to temporary file {temp_path}: {e}", path) from e

    try:
        os.replace(temp_path, path)
    except OSError as e:
        _discard(temp_path)
        raise RenameFailed(f"Failed to replace table file {path}: {e}", path) from e

    logger.debug("Wrote %d records to %s", len(records), path)
