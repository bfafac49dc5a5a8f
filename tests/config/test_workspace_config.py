"""
Tests for workspace configuration (``contract_config``).

Covers settings parsing, environment overrides, the CONTRACT_CONFIG_TRACE
log entry, and the packaged seed blueprints.
"""

from pathlib import Path

import pytest
import yaml

from contract_config import (
    CONFIG_PATH_ENV,
    DATABASE_URL_ENV,
    ConfigurationError,
    WorkspaceSettings,
    get_active_settings,
    get_seed_blueprints,
)
from contract_config.loader import (
    DEFAULT_SEEDS_PATH,
    load_seed_blueprints,
    load_settings,
    load_yaml_file,
    parse_seed_blueprints,
    parse_settings,
)
from contract_kernel.domain.fields import FieldEditor, FieldType


def _write(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data))
    return path


# =========================================================================
# Settings
# =========================================================================


class TestSettings:
    def test_packaged_default(self):
        settings = get_active_settings(environ={})
        assert settings.database_url == "sqlite:///contracts.db"
        assert settings.log_level == "INFO"
        assert settings.autosave is True
        assert settings.echo_sql is False
        assert settings.seed_blueprints_path == DEFAULT_SEEDS_PATH.resolve()

    def test_explicit_path(self, tmp_path):
        path = _write(tmp_path / "custom.yaml", {
            "database": {"url": "sqlite:///custom.db", "echo": True},
            "logging": {"level": "debug"},
            "workspace": {"autosave": False},
        })
        settings = get_active_settings(path, environ={})
        assert settings == WorkspaceSettings(
            database_url="sqlite:///custom.db",
            log_level="DEBUG",
            autosave=False,
            echo_sql=True,
            seed_blueprints_path=DEFAULT_SEEDS_PATH,
        )

    def test_env_selects_file(self, tmp_path):
        path = _write(tmp_path / "env.yaml", {"database": {"url": "sqlite:///env.db"}})
        settings = get_active_settings(environ={CONFIG_PATH_ENV: str(path)})
        assert settings.database_url == "sqlite:///env.db"

    def test_env_overrides_url(self):
        settings = get_active_settings(environ={DATABASE_URL_ENV: "sqlite://"})
        assert settings.database_url == "sqlite://"

    def test_blank_env_url_ignored(self):
        settings = get_active_settings(environ={DATABASE_URL_ENV: "   "})
        assert settings.database_url == "sqlite:///contracts.db"

    def test_relative_seed_path_resolved(self, tmp_path):
        settings = parse_settings(
            {"workspace": {"seed_blueprints": "seeds.yaml"}},
            base_dir=tmp_path,
        )
        assert settings.seed_blueprints_path == (tmp_path / "seeds.yaml").resolve()

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path).database_url == "sqlite:///contracts.db"

    def test_problems_collected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_settings({
                "database": {"url": "", "echo": "yes"},
                "workspace": {"autosave": "sometimes"},
                "logging": [],
            })
        problems = exc_info.value.problems
        assert len(problems) == 4
        assert exc_info.value.code == "CONFIGURATION_INVALID"

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            load_yaml_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_settings(tmp_path / "absent.yaml", environ={})

    def test_trace_logged(self, captured_logs):
        get_active_settings(environ={DATABASE_URL_ENV: "sqlite://"})
        traces = [r for r in captured_logs() if r["message"] == "CONTRACT_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["database_url_overridden"] is True
        assert len(traces[0]["checksum"]) == 64


# =========================================================================
# Seed blueprints
# =========================================================================


class TestSeedBlueprints:
    @pytest.fixture(scope="class")
    def seeds(self):
        return {b.id: b for b in load_seed_blueprints()}

    def test_four_seeds_in_order(self):
        assert [b.id for b in load_seed_blueprints()] == [
            "default-employment-contract",
            "default-nda",
            "default-freelance",
            "default-rental",
        ]

    def test_names(self, seeds):
        assert [b.name for b in seeds.values()] == [
            "Employment Contract",
            "Non-Disclosure Agreement (NDA)",
            "Freelance Service Agreement",
            "Rental / Lease Agreement",
        ]

    def test_positions_contiguous(self, seeds):
        for blueprint in seeds.values():
            assert [f.position for f in blueprint.fields] == list(range(len(blueprint.fields)))

    def test_every_seed_ends_with_client_signature(self, seeds):
        for blueprint in seeds.values():
            last = blueprint.fields[-1]
            assert last.type is FieldType.SIGNATURE
            assert last.editable_by is FieldEditor.CLIENT
            assert last.required

    def test_nda_fields(self, seeds):
        nda = seeds["default-nda"]
        assert [f.id for f in nda.fields] == [
            "nda-party-name", "nda-company", "nda-effective-date", "nda-duration",
            "nda-jurisdiction", "nda-acknowledge", "nda-signature",
        ]
        ack = nda.get_field("nda-acknowledge")
        assert ack.type is FieldType.CHECKBOX
        assert ack.required and ack.editable_by is FieldEditor.CLIENT
        assert not nda.get_field("nda-company").required
        assert nda.get_field("nda-effective-date").type is FieldType.DATE

    def test_rental_optional_fields(self, seeds):
        rental = seeds["default-rental"]
        optional = [f.id for f in rental.fields if not f.required]
        assert optional == ["rent-late-fee", "rent-pets"]

    def test_stable_timestamps(self):
        first = load_seed_blueprints()
        second = load_seed_blueprints()
        assert first == second
        assert first[0].created_at.isoformat() == "2026-01-01T00:00:00+00:00"

    def test_settings_choose_seed_file(self, tmp_path):
        path = _write(tmp_path / "seeds.yaml", {
            "seeded_at": "2026-05-01T00:00:00Z",
            "blueprints": [{
                "id": "only",
                "name": "Only",
                "fields": [{"id": "x", "label": "X", "type": "TEXT"}],
            }],
        })
        seeds = get_seed_blueprints(WorkspaceSettings(seed_blueprints_path=path))
        assert [b.id for b in seeds] == ["only"]

    def test_invalid_seeds_collected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_seed_blueprints({
                "seeded_at": "2026-01-01T00:00:00Z",
                "blueprints": [
                    {"id": "a", "fields": [
                        {"id": "f", "label": "F", "type": "TEXT"},
                        {"id": "f", "label": "G", "type": "TEXT"},
                    ]},
                    {"id": "a"},
                    {"id": "b", "fields": [{"id": "g", "label": "G", "type": "NUMBER"}]},
                    {"name": "no id"},
                ],
            })
        assert len(exc_info.value.problems) == 4

    def test_missing_seeded_at(self):
        with pytest.raises(ConfigurationError):
            parse_seed_blueprints({"blueprints": []})
