"""
Owner snapshot loader for skillforge.

Reads owner snapshots (a character and its items) from YAML files or plain
dictionaries, flattens nested children and validates everything with the
record schemas. This is the only place raw persisted shapes are checked.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from skillforge.entities.records import OwnerRecord
from skillforge.errors import SnapshotLoadError, SnapshotValidationError

logger = structlog.get_logger(__name__)

# Keys under which an item may carry nested child records
NESTED_CHILD_KEYS = ("strike_modes", "events", "contents")


def load_yaml_file(file_path: Path) -> dict[str, Any]:
    """
    Load a YAML file containing a single mapping.

    Args:
        file_path: Path to the YAML file

    Returns:
        The parsed mapping

    Raises:
        SnapshotLoadError: If the file cannot be loaded or parsed
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SnapshotLoadError(f"YAML parsing error in {file_path}: {e}") from e
    except FileNotFoundError as e:
        raise SnapshotLoadError(f"File not found: {file_path}") from e
    except OSError as e:
        raise SnapshotLoadError(f"Error loading {file_path}: {e}") from e

    if not data:
        raise SnapshotLoadError(f"Empty YAML file: {file_path}")
    if not isinstance(data, dict):
        raise SnapshotLoadError(f"Top level of {file_path} must be a mapping")

    return data


def flatten_items(items: list[dict[str, Any]], parent_id: str | None = None) -> list[dict[str, Any]]:
    """
    Flatten nested child records into one list.

    Children listed under ``strike_modes``, ``events`` or ``contents`` get
    ``nested_in`` set to their parent's ID.

    Args:
        items: Raw item dictionaries, possibly with nested children
        parent_id: ID of the item that contains ``items``

    Returns:
        A flat list of item dictionaries

    Raises:
        SnapshotValidationError: If an item is not a mapping or a child names a
            different parent than the one it is nested under
    """
    flat: list[dict[str, Any]] = []
    for raw in items:
        if not isinstance(raw, dict):
            raise SnapshotValidationError(f"Item entries must be mappings, got {raw!r}")

        item = {k: v for k, v in raw.items() if k not in NESTED_CHILD_KEYS}
        if parent_id is not None:
            declared = item.get("nested_in")
            if declared is not None and declared != parent_id:
                raise SnapshotValidationError(
                    f"Item {item.get('id')!r} is listed under {parent_id!r} "
                    f"but declares nested_in={declared!r}"
                )
            item["nested_in"] = parent_id
        flat.append(item)

        for key in NESTED_CHILD_KEYS:
            children = raw.get(key)
            if children is None:
                continue
            if not isinstance(children, list):
                raise SnapshotValidationError(f"'{key}' must be a list in item {item.get('id')!r}")
            flat.extend(flatten_items(children, parent_id=item.get("id")))

    return flat


def validate_owner(owner: OwnerRecord) -> None:
    """
    Check cross-record identifiers.

    Raises:
        SnapshotValidationError: On duplicate IDs or dangling ``nested_in``
    """
    seen: set[str] = set()
    for item in owner.items:
        if item.id in seen:
            raise SnapshotValidationError(f"Duplicate item id {item.id!r} in owner {owner.id!r}")
        seen.add(item.id)

    for item in owner.items:
        if item.nested_in is not None and item.nested_in not in seen:
            raise SnapshotValidationError(
                f"Item {item.id!r} is nested in unknown item {item.nested_in!r}"
            )
        if item.nested_in == item.id:
            raise SnapshotValidationError(f"Item {item.id!r} is nested in itself")


def load_owner(data: dict[str, Any]) -> OwnerRecord:
    """
    Build a validated owner record from plain data.

    Args:
        data: Owner mapping (``id``, ``name``, ``items``, ...); a top-level
            ``owner`` key is unwrapped

    Returns:
        The validated OwnerRecord

    Raises:
        SnapshotValidationError: If the data does not match the schemas
    """
    if "owner" in data and isinstance(data["owner"], dict):
        data = data["owner"]

    payload = dict(data)
    items = payload.get("items") or []
    if not isinstance(items, list):
        raise SnapshotValidationError("'items' must be a list")
    payload["items"] = flatten_items(items)

    try:
        owner = OwnerRecord.model_validate(payload)
    except ValidationError as e:
        raise SnapshotValidationError(f"Invalid owner snapshot: {e}") from e

    validate_owner(owner)

    logger.debug("owner_snapshot_loaded", owner_id=owner.id, item_count=len(owner.items))
    return owner


def load_owner_file(file_path: Path) -> OwnerRecord:
    """Load and validate an owner snapshot from a YAML file."""
    return load_owner(load_yaml_file(file_path))
