from pathlib import Path
from typing import Any, Dict, Optional, Union

from jsonschema import validate, ValidationError, SchemaError
from packaging import version
from pydantic import ValidationError as ModelValidationError

from taskboard.logs import get_logger
from taskboard.models import Board
from taskboard.recovery import CorruptionError, FatalError, MigrationNeededError
from taskboard.version import APP_SCHEMA_VERSION

log = get_logger("store.validate")

def board_schema() -> dict:
    """JSON Schema of the persisted board document."""
    return Board.model_json_schema(mode='serialization')

def check_schema_version(found: Optional[str], source: Union[Path, str] = "board") -> None:
    """
    Compare the schema version a board was written with against the app's.

    Raises:
        FatalError: the data was written by a newer version of taskboard.
        MigrationNeededError: the data predates the current schema.
    """
    if found is None:
        raise MigrationNeededError(f"{source} has no schema_version; it predates versioned boards")
    try:
        found_version = version.parse(str(found))
    except version.InvalidVersion as e:
        raise CorruptionError(f"{source} has an invalid schema_version {found!r}") from e

    app_version = version.parse(APP_SCHEMA_VERSION)
    log.debug(f"{source}: data schema {found_version}; app schema {app_version}")
    if found_version > app_version:
        raise FatalError(f"{source} was written by a newer schema ({found}); upgrade taskboard")
    if found_version < app_version:
        raise MigrationNeededError(f"{source} uses schema {found}, this taskboard reads {APP_SCHEMA_VERSION}")

def validate_board_data(data: Dict[str, Any], source: Union[Path, str] = "board") -> None:
    """Validate raw board data against the board JSON Schema."""
    try:
        validate(instance=data, schema=board_schema())
    except ValidationError as e:
        path = "/".join(str(p) for p in e.absolute_path) or "<root>"
        log.error(f"Schema validation failed for {source} at {path}: {e.message}")
        raise CorruptionError(f"{source} is not a valid board ({path}: {e.message})") from e
    except SchemaError as e:
        log.critical(f"Board schema is invalid: {e.message}")
        raise FatalError(f"Board schema is invalid: {e.message}") from e

def load_board(data: Dict[str, Any], source: Union[Path, str] = "board") -> Board:
    """Check version and schema of raw data, then build the Board model."""
    check_schema_version(data.get("schema_version"), source)
    validate_board_data(data, source)
    try:
        return Board.model_validate(data)
    except ModelValidationError as e:
        raise CorruptionError(f"{source} could not be loaded: {e}") from e
