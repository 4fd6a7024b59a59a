"""
Unit tests for configuration loader module.
"""

import pytest
import yaml
from pathlib import Path
from unittest.mock import patch, mock_open

import schemaform.config_loader as config_loader
from schemaform.config_loader import (
    load_config, validate_config, get_default_config, deep_merge,
    get_config_value, reload_config
)


class TestDeepMerge:
    """Test cases for deep_merge function."""

    def test_deep_merge_simple_dicts(self):
        """Test deep merging of simple dictionaries."""
        base = {'a': 1, 'b': 2}
        update = {'b': 3, 'c': 4}

        result = deep_merge(base, update)

        assert result == {'a': 1, 'b': 3, 'c': 4}
        # Ensure original dicts are not modified
        assert base == {'a': 1, 'b': 2}
        assert update == {'b': 3, 'c': 4}

    def test_deep_merge_nested_dicts(self):
        """Test deep merging of nested dictionaries."""
        base = {
            'app': {'name': 'Base App', 'version': '1.0'},
            'drawing': {'close_threshold': 10, 'mode': 'drag'}
        }
        update = {
            'app': {'name': 'Updated App'},
            'drawing': {'mode': 'click', 'canvas_width': 640}
        }

        result = deep_merge(base, update)

        assert result == {
            'app': {'name': 'Updated App', 'version': '1.0'},
            'drawing': {'close_threshold': 10, 'mode': 'click', 'canvas_width': 640}
        }

    def test_deep_merge_empty_dicts(self):
        """Test deep merging with empty dictionaries."""
        base = {'a': 1, 'b': 2}

        assert deep_merge(base, {}) == base
        assert deep_merge({}, base) == base

    def test_deep_merge_lists_are_replaced(self):
        """Lists such as the palette are replaced, not merged."""
        base = {'drawing': {'palette': ['#000', '#111']}}
        update = {'drawing': {'palette': ['#fff']}}

        assert deep_merge(base, update) == {'drawing': {'palette': ['#fff']}}


class TestGetDefaultConfig:
    """Test cases for get_default_config function."""

    def test_get_default_config_structure(self):
        """Test that default config has expected structure."""
        config = get_default_config()

        for section in ['app', 'schema', 'ui', 'drawing', 'logging']:
            assert section in config

    def test_get_default_config_values(self):
        """Test that default config has expected values."""
        config = get_default_config()

        assert config['app']['name'] == 'Schema Form Studio'
        assert config['schema']['schemas_dir'] == 'schemas'
        assert config['ui']['default_language'] == 'en'
        assert config['drawing']['close_threshold'] == 10
        assert config['drawing']['mode'] == 'drag'


class TestLoadConfig:
    """Test cases for load_config function."""

    def test_load_config_file_not_exists(self, tmp_path):
        """Test loading config when file doesn't exist."""
        config = load_config(tmp_path / 'nonexistent.yaml')
        assert config == get_default_config()

    def test_load_config_valid_file(self, tmp_path):
        """Test loading config from valid YAML file."""
        config_file = tmp_path / 'config.yaml'
        config_file.write_text(
            "app:\n  name: Test App\ndrawing:\n  close_threshold: 15\n  mode: click\n",
            encoding='utf-8'
        )

        config = load_config(config_file)

        assert config['app']['name'] == 'Test App'
        assert config['drawing']['close_threshold'] == 15
        assert config['drawing']['mode'] == 'click'
        # Should have defaults for missing values
        assert config['app']['version'] == '1.0.0'
        assert config['drawing']['canvas_width'] == 400

    def test_load_config_invalid_yaml(self):
        """Test loading config with invalid YAML."""
        with patch('builtins.open', mock_open(read_data="invalid: yaml: content: [")):
            with patch('pathlib.Path.exists', return_value=True):
                config = load_config(Path('invalid.yaml'))

                assert config == get_default_config()

    def test_load_config_empty_file(self, tmp_path):
        """Test loading config from empty file."""
        config_file = tmp_path / 'empty.yaml'
        config_file.write_text("", encoding='utf-8')

        assert load_config(config_file) == get_default_config()

    def test_load_config_non_dict_content(self, tmp_path):
        """Test loading config with non-dictionary content."""
        config_file = tmp_path / 'list.yaml'
        config_file.write_text("- item1\n- item2\n", encoding='utf-8')

        assert load_config(config_file) == get_default_config()

    def test_load_config_io_error(self):
        """Test loading config when IO error occurs."""
        with patch('builtins.open', side_effect=IOError("Permission denied")):
            with patch('pathlib.Path.exists', return_value=True):
                config = load_config(Path('protected.yaml'))

                assert config == get_default_config()

    def test_explicit_path_bypasses_cache(self, tmp_path, monkeypatch):
        """Only the default config file is cached."""
        monkeypatch.setattr(config_loader, '_config_cache', {'cached': True})
        config_file = tmp_path / 'config.yaml'
        config_file.write_text("ui:\n  default_language: ja\n", encoding='utf-8')

        assert load_config(config_file)['ui']['default_language'] == 'ja'
        assert load_config() == {'cached': True}

    def test_reload_and_get_config_value(self, tmp_path, monkeypatch):
        """get_config_value reads from the cached default config file."""
        config_file = tmp_path / 'config.yaml'
        config_file.write_text("drawing:\n  close_threshold: 25\n", encoding='utf-8')
        monkeypatch.setattr(config_loader, 'CONFIG_FILE', config_file)
        monkeypatch.setattr(config_loader, '_config_cache', None)

        reload_config()

        assert get_config_value('drawing', 'close_threshold') == 25
        assert get_config_value('drawing', 'missing', 'fallback') == 'fallback'
        assert get_config_value('nosection', 'key', 3) == 3


class TestValidateConfig:
    """Test cases for validate_config function."""

    def test_validate_config_valid_complete(self):
        """Test validating a complete, valid configuration."""
        assert validate_config(get_default_config()) is True

    def test_validate_config_missing_sections(self):
        """Test validating config with missing required sections."""
        config = {'app': {'name': 'Test', 'version': '1.0'}}

        assert validate_config(config) is False

    def test_validate_config_missing_app_fields(self):
        """Test validating config with missing app fields."""
        config = get_default_config()
        del config['app']['name']

        assert validate_config(config) is False

    @pytest.mark.parametrize("key,value", [
        ('close_threshold', 0),
        ('close_threshold', 'far'),
        ('canvas_width', -1),
        ('canvas_height', 'tall'),
        ('mode', 'freehand'),
        ('palette', []),
    ])
    def test_validate_config_invalid_drawing(self, key, value):
        """Test validating config with invalid drawing settings."""
        config = get_default_config()
        config['drawing'][key] = value

        assert validate_config(config) is False

    def test_validate_config_invalid_languages(self):
        config = get_default_config()
        config['ui']['languages'] = 'en,ja'

        assert validate_config(config) is False

    def test_shipped_config_is_valid(self):
        """The config.yaml in the repository passes validation."""
        shipped = Path(__file__).parent / 'config.yaml'
        with open(shipped, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)

        assert validate_config(deep_merge(get_default_config(), user_config)) is True


if __name__ == '__main__':
    pytest.main([__file__])
