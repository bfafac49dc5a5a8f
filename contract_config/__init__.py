"""
contract_config -- single public entrypoint for workspace configuration.

Responsibility:
    Provides the ONLY way to obtain runtime settings through
    ``get_active_settings()`` and the seed blueprint set through
    ``get_seed_blueprints()``.  No other component reads configuration
    files or environment variables directly.

Architecture position:
    Configuration -- YAML-driven.  This package sits above
    ``contract_kernel`` and below ``contract_services``.  The kernel MUST
    NEVER import from ``contract_config``.

Environment:
    CONTRACT_WORKSPACE_CONFIG  path to a settings YAML file
                               (default: ``contract_config/sets/default.yaml``)
    CONTRACT_DATABASE_URL      overrides ``database.url``

Failure modes:
    - ``FileNotFoundError`` -- the selected settings or seeds file is missing.
    - ``ConfigurationError`` -- structural problems in either file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Mapping

from contract_config.exceptions import ConfigurationError
from contract_config.loader import (
    DEFAULT_SEEDS_PATH,
    DEFAULT_SETTINGS_PATH,
    compute_checksum,
    load_seed_blueprints,
    load_settings,
)
from contract_config.schema import WorkspaceSettings
from contract_kernel.domain.blueprint import Blueprint

_logger = logging.getLogger("contract_kernel.config")

CONFIG_PATH_ENV = "CONTRACT_WORKSPACE_CONFIG"
DATABASE_URL_ENV = "CONTRACT_DATABASE_URL"

__all__ = [
    "CONFIG_PATH_ENV",
    "ConfigurationError",
    "DATABASE_URL_ENV",
    "WorkspaceSettings",
    "get_active_settings",
    "get_seed_blueprints",
]


def get_active_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> WorkspaceSettings:
    """The ONLY public settings entrypoint.

    Resolution order for the file: ``config_path``, then
    ``$CONTRACT_WORKSPACE_CONFIG``, then the packaged default.  A non-empty
    ``$CONTRACT_DATABASE_URL`` replaces the file's database URL.

    Guarantees:
        A ``CONTRACT_CONFIG_TRACE`` log entry is emitted on every
        successful call.

    Raises:
        FileNotFoundError: If the selected file does not exist.
        ConfigurationError: If the file is structurally invalid.
    """
    env = os.environ if environ is None else environ
    path = Path(config_path or env.get(CONFIG_PATH_ENV) or DEFAULT_SETTINGS_PATH)
    settings = load_settings(path)

    url_override = (env.get(DATABASE_URL_ENV) or "").strip()
    if url_override:
        settings = replace(settings, database_url=url_override)

    _logger.info(
        "CONTRACT_CONFIG_TRACE",
        extra={
            "trace_type": "CONTRACT_CONFIG_TRACE",
            "config_path": str(path),
            "checksum": compute_checksum(path),
            "database_url_overridden": bool(url_override),
            "log_level": settings.log_level,
            "autosave": settings.autosave,
        },
    )
    return settings


def get_seed_blueprints(settings: WorkspaceSettings | None = None) -> tuple[Blueprint, ...]:
    """Seed blueprints named by ``settings`` (packaged set by default)."""
    path = DEFAULT_SEEDS_PATH
    if settings is not None and settings.seed_blueprints_path is not None:
        path = settings.seed_blueprints_path
    seeds = load_seed_blueprints(path)
    _logger.debug(
        "seed_blueprints_loaded",
        extra={"path": str(path), "blueprint_count": len(seeds)},
    )
    return seeds
