"""
Test Suite for Configuration Management

Tests:
- Preset loading
- Dictionary and file loading
- Merging
- Validation
"""

import pytest

from sqlseed.config import Config, ConfigLoader, ConfigValidator, get_default_config


@pytest.fixture
def loader():
    return ConfigLoader()


class TestConfigLoader:
    """Test configuration loading"""

    def test_presets_available(self, loader):
        assert loader.list_presets() == ["default", "mysql", "postgres", "sqlite"]

    def test_default_preset_matches_defaults(self, loader):
        assert loader.load_preset("default").to_dict() == get_default_config().to_dict()

    def test_postgres_preset(self, loader):
        config = loader.load_preset("postgres")
        assert config.sql.dialect == "postgres"
        assert config.sql.quote_identifiers is True
        assert config.sql.rows_per_statement == 1000

    def test_sqlite_preset(self, loader):
        config = loader.load_preset("sqlite")
        assert config.sql.dialect == "sqlite"
        assert config.generation.null_probability == 0.1

    def test_presets_are_copies(self, loader):
        loader.load_preset("mysql").sql.dialect = "ansi"
        assert loader.load_preset("mysql").sql.dialect == "mysql"

    def test_unknown_preset(self, loader):
        with pytest.raises(ValueError, match="not found"):
            loader.load_preset("oracle")

    def test_load_from_dict(self, loader):
        config = loader.load_from_dict({
            "generation": {"seed": 7, "null_probability": 0.2},
            "row_counts": {"users": 50},
        })
        assert config.generation.seed == 7
        assert config.generation.null_probability == 0.2
        assert config.generation.max_unique_attempts == 1000
        assert config.row_counts == {"users": 50}

    def test_unknown_section(self, loader):
        with pytest.raises(ValueError, match="Unknown configuration section"):
            loader.load_from_dict({"privacy": {"epsilon": 1.0}})

    def test_unknown_field(self, loader):
        with pytest.raises(ValueError, match="Invalid 'sql' configuration"):
            loader.load_from_dict({"sql": {"colour": "blue"}})

    def test_save_and_load(self, loader, tmp_path):
        config = loader.load_preset("postgres")
        config.row_counts = {"orders": 12}
        config.temporal.anchor = "2024-06-15"
        path = tmp_path / "nested" / "config.yaml"

        loader.save_config(config, path)
        assert loader.load_from_file(path).to_dict() == config.to_dict()

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(FileNotFoundError):
            loader.load_from_file(tmp_path / "missing.yaml")


class TestConfigMerge:
    """Test configuration merging"""

    def test_merge_dict(self, loader):
        merged = loader.merge_configs(Config(), {"sql": {"dialect": "mysql"}, "row_counts": {"a": 1}})
        assert merged.sql.dialect == "mysql"
        assert merged.row_counts == {"a": 1}

    def test_merge_preset_name(self, loader):
        merged = loader.merge_configs(Config(), "postgres")
        assert merged.sql.rows_per_statement == 1000

    def test_merge_keeps_base_unchanged(self, loader):
        base = Config()
        loader.merge_configs(base, {"sql": {"dialect": "mysql"}})
        assert base.sql.dialect == "ansi"


class TestConfigValidator:
    """Test configuration validation"""

    def test_default_is_valid(self):
        assert ConfigValidator.validate(Config()) == (True, [])

    def test_every_preset_is_valid(self, loader):
        for name in loader.list_presets():
            is_valid, errors = ConfigValidator.validate(loader.load_preset(name))
            assert is_valid, (name, errors)

    def test_invalid_values(self):
        config = Config()
        config.generation.null_probability = 1.5
        config.sql.dialect = "oracle"
        config.numeric.int_min = 10
        config.numeric.int_max = 1
        config.row_counts = {"users": -1}

        is_valid, errors = ConfigValidator.validate(config)
        assert not is_valid
        assert len(errors) == 4
        assert any("null_probability" in error for error in errors)
        assert any("row_counts.users" in error for error in errors)
