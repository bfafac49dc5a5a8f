"""
Configuration Loader (``contract_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into typed values: ``WorkspaceSettings``
from a settings file and the seed ``Blueprint`` set from the seeds file.
Runtime callers go through ``contract_config.get_active_settings()``;
this module is the tooling underneath it.

Architecture position
---------------------
**Config layer**.  Depends on ``contract_kernel.domain`` for the value
types it produces; the kernel never imports this package.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass.
* Seed blueprints have unique ids, unique field ids, and positions
  0..n-1 in file order.
* Structural problems are collected and raised together as one
  ``ConfigurationError``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong shape or unknown enum values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

import yaml

from contract_config.exceptions import ConfigurationError
from contract_config.schema import WorkspaceSettings
from contract_kernel.domain.blueprint import Blueprint
from contract_kernel.domain.fields import BlueprintField
from contract_kernel.domain.snapshot import parse_timestamp
from contract_kernel.exceptions import ContractKernelError

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "sets" / "default.yaml"
DEFAULT_SEEDS_PATH = Path(__file__).parent / "seeds" / "blueprints.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), ["top level must be a mapping"])
    return data


def compute_checksum(path: Path) -> str:
    """SHA-256 of the file's bytes."""
    return hashlib.sha256(Path(path).read_bytes()).hexdigest()


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def parse_settings(
    data: dict[str, Any],
    base_dir: Path | None = None,
    source: str = "<settings>",
) -> WorkspaceSettings:
    """Build ``WorkspaceSettings`` from a parsed settings mapping.

    Relative ``workspace.seed_blueprints`` paths resolve against
    ``base_dir`` (the settings file's directory).
    """
    problems: list[str] = []
    database = _section(data, "database", problems)
    logging_section = _section(data, "logging", problems)
    workspace = _section(data, "workspace", problems)

    defaults = WorkspaceSettings()
    database_url = database.get("url", defaults.database_url)
    if not isinstance(database_url, str) or not database_url.strip():
        problems.append("database.url must be a non-empty string")

    echo_sql = database.get("echo", defaults.echo_sql)
    if not isinstance(echo_sql, bool):
        problems.append("database.echo must be a boolean")

    log_level = logging_section.get("level", defaults.log_level)
    if not isinstance(log_level, str):
        problems.append("logging.level must be a string")

    autosave = workspace.get("autosave", defaults.autosave)
    if not isinstance(autosave, bool):
        problems.append("workspace.autosave must be a boolean")

    seeds_path: Path | None = DEFAULT_SEEDS_PATH
    raw_seeds = workspace.get("seed_blueprints")
    if raw_seeds is not None:
        if not isinstance(raw_seeds, str):
            problems.append("workspace.seed_blueprints must be a path string")
        else:
            seeds_path = Path(raw_seeds)
            if not seeds_path.is_absolute() and base_dir is not None:
                seeds_path = (base_dir / seeds_path).resolve()

    if problems:
        raise ConfigurationError(source, problems)

    return WorkspaceSettings(
        database_url=database_url,
        log_level=log_level.upper(),
        autosave=autosave,
        echo_sql=echo_sql,
        seed_blueprints_path=seeds_path,
    )


def load_settings(path: Path = DEFAULT_SETTINGS_PATH) -> WorkspaceSettings:
    path = Path(path)
    return parse_settings(load_yaml_file(path), base_dir=path.parent, source=str(path))


def _section(data: dict[str, Any], key: str, problems: list[str]) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        problems.append(f"{key} must be a mapping")
        return {}
    return value


# ---------------------------------------------------------------------------
# Seed blueprints
# ---------------------------------------------------------------------------


def parse_seed_field(data: dict[str, Any], position: int) -> BlueprintField:
    """Build one seed field; its position is its index in the file."""
    return BlueprintField(
        id=str(data["id"]),
        type=data["type"],
        label=str(data["label"]),
        position=position,
        required=bool(data.get("required", False)),
        editable_by=data.get("editable_by"),
        placeholder=data.get("placeholder"),
        default_checked=data.get("default_checked"),
    )


def parse_seed_blueprints(
    data: dict[str, Any],
    source: str = "<seeds>",
) -> tuple[Blueprint, ...]:
    """
    Build the seed blueprint set from a parsed seeds mapping.

    Every seed is stamped with the file's ``seeded_at`` timestamp, so the
    same file always yields identical values.

    Raises:
        ConfigurationError: listing every structural problem found.
    """
    problems: list[str] = []
    seeded_at = None
    try:
        seeded_at = parse_timestamp(data.get("seeded_at"))
    except ValueError:
        problems.append("seeded_at must be an ISO-8601 timestamp")

    entries = data.get("blueprints") or []
    if not isinstance(entries, list):
        raise ConfigurationError(source, problems + ["blueprints must be a list"])

    blueprints: list[Blueprint] = []
    seen_ids: set[str] = set()
    for index, entry in enumerate(entries):
        label = f"blueprints[{index}]"
        if not isinstance(entry, dict):
            problems.append(f"{label} must be a mapping")
            continue
        blueprint_id = entry.get("id")
        if not blueprint_id:
            problems.append(f"{label} has no id")
            continue
        if blueprint_id in seen_ids:
            problems.append(f"duplicate blueprint id {blueprint_id!r}")
            continue
        seen_ids.add(blueprint_id)

        fields: list[BlueprintField] = []
        field_ids: set[str] = set()
        for position, raw_field in enumerate(entry.get("fields") or []):
            try:
                built = parse_seed_field(raw_field, position)
            except (KeyError, TypeError, ValueError, ContractKernelError) as exc:
                problems.append(f"{blueprint_id} field {position}: {type(exc).__name__}: {exc}")
                continue
            if built.id in field_ids:
                problems.append(f"{blueprint_id} repeats field id {built.id!r}")
                continue
            field_ids.add(built.id)
            fields.append(built)

        if seeded_at is not None:
            blueprints.append(Blueprint(
                id=str(blueprint_id),
                name=str(entry.get("name") or blueprint_id),
                description=str(entry.get("description") or ""),
                fields=tuple(fields),
                created_at=seeded_at,
                updated_at=seeded_at,
            ))

    if problems:
        raise ConfigurationError(source, problems)
    return tuple(blueprints)


def load_seed_blueprints(path: Path = DEFAULT_SEEDS_PATH) -> tuple[Blueprint, ...]:
    path = Path(path)
    return parse_seed_blueprints(load_yaml_file(path), source=str(path))
