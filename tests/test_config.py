#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Test suite for config.py"""

import os
import pytest

from csprovision import config
from csprovision.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Clear any CSP_ environment variables"""
    for key in list(os.environ.keys()):
        if key.startswith('CSP_'):
            monkeypatch.delenv(key, raising=False)


class TestLoadYamlConfig:
    """Test the _load_yaml_config function"""

    def test_explicit_config_file(self, tmp_path):
        """Test loading an explicitly specified config file"""
        config_file = tmp_path / "custom_config.yaml"
        config_file.write_text("template_dir: /srv/templates\nmax_workers: 4\n")

        result = config._load_yaml_config(str(config_file))

        assert result['template_dir'] == '/srv/templates'
        assert result['max_workers'] == 4

    def test_explicit_config_file_not_found(self, tmp_path):
        """Test loading a non-existent explicit config file returns empty dict"""
        result = config._load_yaml_config(str(tmp_path / "nonexistent.yaml"))

        assert result == {}

    def test_search_config_in_config_subdir(self, tmp_path, monkeypatch):
        """Test finding config.yaml in config/ subdirectory"""
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("template_dir: found_in_config_subdir\n")

        monkeypatch.chdir(tmp_path)
        result = config._load_yaml_config()

        assert result['template_dir'] == 'found_in_config_subdir'

    def test_cwd_takes_priority_over_config_subdir(self, tmp_path, monkeypatch):
        """Test that config in CWD takes priority over config/ subdirectory"""
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("template_dir: from_subdir\n")
        (tmp_path / "config.yaml").write_text("template_dir: from_cwd\n")

        monkeypatch.chdir(tmp_path)
        result = config._load_yaml_config()

        assert result['template_dir'] == 'from_cwd'

    def test_search_alternative_config_names(self, tmp_path, monkeypatch):
        """Test finding config files named after the package"""
        (tmp_path / "csprovision.yml").write_text("template_dir: found_csprovision_yml\n")

        monkeypatch.chdir(tmp_path)
        result = config._load_yaml_config()

        assert result['template_dir'] == 'found_csprovision_yml'

    def test_empty_config_file(self, tmp_path, monkeypatch):
        """Test loading an empty config file returns empty dict"""
        (tmp_path / "config.yaml").write_text("# only a comment\n")

        monkeypatch.chdir(tmp_path)
        result = config._load_yaml_config()

        assert result == {}

    def test_malformed_config_file(self, tmp_path):
        """Test that a YAML syntax error is reported as a ConfigError"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("template_dir: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            config._load_yaml_config(str(config_file))

        assert str(config_file) in exc_info.value.message

    def test_config_file_not_a_mapping(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError):
            config._load_yaml_config(str(config_file))


class TestExpandPath:
    """Test the _expand_path function"""

    def test_expand_user_home(self):
        """Test expanding ~ to user home directory"""
        result = config._expand_path("~/templates")

        assert result.startswith(os.path.expanduser("~"))
        assert "~" not in result

    def test_expand_env_variable(self, monkeypatch):
        """Test expanding environment variables in path"""
        monkeypatch.setenv("TEST_VAR", "/test/value")

        assert config._expand_path("$TEST_VAR/subdir") == "/test/value/subdir"

    def test_non_string_values_untouched(self):
        """Test that numbers from YAML are passed through"""
        assert config._expand_path(4) == 4
        assert config._expand_path(None) is None


class TestConfigClass:
    """Test the Config class"""

    def test_default_values(self, tmp_path, monkeypatch):
        """Test that Config uses sensible defaults"""
        monkeypatch.chdir(tmp_path)

        cfg = config.Config()

        assert cfg.warehouse_file == 'config/warehouse.yaml'
        assert cfg.transfers_file == 'config/collection_system_transfers.tsv'
        assert cfg.template_dir == config.DEFAULT_TEMPLATE_DIR
        assert cfg.max_workers == 1
        assert cfg.smb_timeout == 60
        assert cfg.smbclient == 'smbclient'
        assert cfg.smb_protocol == 'SMB3'

    def test_config_from_yaml(self, tmp_path, monkeypatch):
        """Test that Config loads values from config.yaml"""
        (tmp_path / "config.yaml").write_text(
            "template_dir: custom_templates\nmax_workers: 3\nsmb_timeout: 15\n")

        monkeypatch.chdir(tmp_path)
        cfg = config.Config()

        assert cfg.template_dir == 'custom_templates'
        assert cfg.max_workers == 3
        assert cfg.smb_timeout == 15

    def test_env_variable_override(self, tmp_path, monkeypatch):
        """Test that environment variables override config file values"""
        (tmp_path / "config.yaml").write_text("max_workers: 2\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CSP_MAX_WORKERS", "8")

        cfg = config.Config()

        assert cfg.max_workers == 8

    def test_config_file_from_env(self, tmp_path, monkeypatch):
        """Test that CSP_CONFIG_FILE selects the config file"""
        config_file = tmp_path / "elsewhere.yaml"
        config_file.write_text("smbclient: /opt/samba/bin/smbclient\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CSP_CONFIG_FILE", str(config_file))

        cfg = config.Config()

        assert cfg.config_file == str(config_file)
        assert cfg.smbclient == '/opt/samba/bin/smbclient'

    def test_broken_config_file_read_on_first_use(self, tmp_path, monkeypatch):
        """Test that a broken config.yaml only fails once a value is needed"""
        (tmp_path / "config.yaml").write_text("max_workers: [2\n")
        monkeypatch.chdir(tmp_path)

        cfg = config.Config()

        with pytest.raises(ConfigError):
            cfg.max_workers

    def test_invalid_integer(self, tmp_path, monkeypatch):
        """Test that a non-numeric worker count is rejected"""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CSP_MAX_WORKERS", "many")

        cfg = config.Config()

        with pytest.raises(ValueError):
            cfg.max_workers

    def test_integer_below_one(self, tmp_path, monkeypatch):
        """Test that a zero timeout is rejected"""
        monkeypatch.chdir(tmp_path)
        cfg = config.Config()
        cfg.load_config(smb_timeout=0)

        with pytest.raises(ValueError):
            cfg.smb_timeout


class TestLoadConfig:
    """Test the Config.load_config method"""

    def test_load_config_applies_values(self, tmp_path, monkeypatch):
        """Test that load_config applies values from config file"""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("warehouse_file: /etc/csprovision/warehouse.yaml\n")
        monkeypatch.chdir(tmp_path)

        cfg = config.Config()
        cfg.load_config(config_file=str(config_file))

        assert cfg.warehouse_file == '/etc/csprovision/warehouse.yaml'

    def test_load_config_with_overrides(self, tmp_path, monkeypatch):
        """Test that runtime overrides beat environment variables"""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CSP_TEMPLATE_DIR", "/from/env")

        cfg = config.Config()
        cfg.load_config(template_dir='/from/cli', max_workers=None)

        assert cfg.template_dir == '/from/cli'
        assert cfg.max_workers == 1

    def test_to_dict(self, tmp_path, monkeypatch):
        """Test that to_dict lists every setting"""
        monkeypatch.chdir(tmp_path)

        values = config.Config().to_dict()

        assert set(values) == {'config_file', 'warehouse_file', 'transfers_file', 'template_dir',
                               'max_workers', 'smb_timeout', 'smbclient', 'smb_protocol'}
