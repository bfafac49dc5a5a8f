"""
Workspace configuration schema.

YAML files are parsed into these frozen types by ``contract_config.loader``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class WorkspaceSettings:
    """Runtime settings for a contract workspace."""

    database_url: str = "sqlite:///contracts.db"
    log_level: str = "INFO"
    autosave: bool = True
    echo_sql: bool = False
    seed_blueprints_path: Path | None = None
