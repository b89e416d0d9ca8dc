"""
Tests for the bundled exercise catalog and the YAML config loader.
"""

import pytest

from liftlog.core.catalog import (
    CATALOG,
    PRESET_TEMPLATES,
    build_catalog,
    build_preset_templates,
    catalog_size,
    find_muscle_group,
)
from liftlog.core.engine.config_loader import load_bundled_config, load_catalog_config
from liftlog.core.models import MUSCLE_GROUPS


class TestBundledCatalog:
    def test_size_and_groups(self):
        """The bundled file lists 113 exercises across 13 groups."""
        assert catalog_size() == 113
        assert len(CATALOG) == 13
        assert list(CATALOG) == [g for g in MUSCLE_GROUPS if g in CATALOG]

    def test_find_muscle_group(self):
        assert find_muscle_group("Barbell Back Squat") == "quads"
        assert find_muscle_group("Flat Barbell Bench Press") == "chest"
        assert find_muscle_group("Moon Walk") is None

    def test_preset_templates(self):
        assert set(PRESET_TEMPLATES) == {"Push Day", "Pull Day", "Leg Day", "Upper Body", "Lower Body"}
        assert all(len(names) == 6 for names in PRESET_TEMPLATES.values())

    def test_bundled_config_has_both_sections(self):
        config = load_bundled_config()
        assert "catalog" in config and "templates" in config


class TestUserOverride:
    def test_override_merges(self, tmp_path):
        """A user file can add groups and templates; lists replace per group."""
        user = tmp_path / "catalog.yaml"
        user.write_text(
            "catalog:\n"
            "  stretching:\n"
            "    - Couch Stretch\n"
            "templates:\n"
            "  Mobility:\n"
            "    - Couch Stretch\n"
        )
        config = load_catalog_config(user)
        catalog = build_catalog(config)

        assert catalog["stretching"] == ["Couch Stretch"]
        assert "chest" in catalog
        templates = build_preset_templates(config)
        assert templates["Mobility"] == ["Couch Stretch"]
        assert "Push Day" in templates

    def test_malformed_override_is_ignored(self, tmp_path):
        user = tmp_path / "catalog.yaml"
        user.write_text("- just\n- a list\n")
        with pytest.warns(UserWarning, match="Ignoring user catalog override"):
            config = load_catalog_config(user)
        assert build_catalog(config) == CATALOG

    def test_missing_override_path(self, tmp_path):
        config = load_catalog_config(tmp_path / "absent.yaml")
        assert build_catalog(config) == CATALOG


class TestBuildCatalog:
    def test_unknown_group(self):
        with pytest.raises(ValueError, match="Unknown muscle groups"):
            build_catalog({"catalog": {"forearms": ["Wrist Curl"]}})

    def test_duplicate_name(self):
        with pytest.raises(ValueError, match="twice"):
            build_catalog({"catalog": {"chest": ["Dips"], "triceps": ["Dips"]}})

    def test_empty(self):
        assert build_catalog({}) == {}
