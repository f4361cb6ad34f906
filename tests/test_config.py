"""
Unit tests for configuration loading and settings precedence.

Run with:
    pytest tests/test_config.py -v
"""

import json
import logging

import pytest

from git_pr_ai.config import Config, ConfigManager, resolve_settings, setup_logging


class TestConfig:

    def test_defaults(self):
        config = Config()
        assert config.provider == "auto"
        assert config.llm == "auto"
        assert config.num_options == 3
        assert config.max_subject_length == 72
        assert config.web is True

    def test_to_dict_excludes_none(self):
        d = Config().to_dict()
        assert "model" not in d
        assert "provider" in d

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"provider": "gitlab", "unknown_key": "value"})
        assert config.provider == "gitlab"
        assert not hasattr(config, "unknown_key")

    def test_validate_invalid_provider(self):
        config = Config(provider="bitbucket")
        warnings = config.validate()
        assert len(warnings) == 1
        assert config.provider == "auto"

    def test_validate_invalid_llm(self):
        config = Config(llm="gpt4")
        assert len(config.validate()) == 1
        assert config.llm == "auto"

    @pytest.mark.parametrize("value", [1, 6, "3"])
    def test_validate_num_options_range(self, value):
        config = Config(num_options=value)
        warnings = config.validate()
        assert any("num_options" in w for w in warnings)
        assert config.num_options == 3

    def test_validate_invalid_max_subject_length(self):
        config = Config(max_subject_length=-1)
        warnings = config.validate()
        assert any("max_subject_length" in w for w in warnings)
        assert config.max_subject_length == 72

    def test_validate_invalid_web(self):
        config = Config(web="yes")
        assert config.validate()
        assert config.web is True

    def test_validate_valid_config_no_warnings(self):
        assert Config().validate() == []

    def test_from_dict_triggers_validation(self, capsys):
        Config.from_dict({"provider": "invalid"})
        err = capsys.readouterr().err
        assert "Config warning" in err


class TestConfigManager:

    def test_load_returns_defaults_when_no_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        manager = ConfigManager()
        assert manager.load() == Config()
        assert manager.get_config_path() is None

    def test_load_reads_local_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        config_file = tmp_path / ".git-pr-ai.json"
        config_file.write_text(json.dumps({"provider": "gitlab", "num_options": 4}))

        manager = ConfigManager()
        config = manager.load()
        assert config.provider == "gitlab"
        assert config.num_options == 4
        assert manager.get_config_path() == config_file

    def test_local_file_wins_over_global(self, tmp_path, monkeypatch):
        home = tmp_path / "home"
        home.mkdir()
        (home / ".git-pr-ai.json").write_text(json.dumps({"provider": "github"}))
        work = tmp_path / "work"
        work.mkdir()
        (work / ".git-pr-ai.json").write_text(json.dumps({"provider": "gitlab"}))
        monkeypatch.chdir(work)
        monkeypatch.setattr("pathlib.Path.home", lambda: home)

        assert ConfigManager().load().provider == "gitlab"

    def test_save_and_load_roundtrip(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path)

        ConfigManager().save(Config(provider="github", llm="ollama", model="llama3.2:3b"), global_config=True)

        loaded = ConfigManager().load()
        assert loaded.provider == "github"
        assert loaded.llm == "ollama"
        assert loaded.model == "llama3.2:3b"

    def test_malformed_json_returns_defaults(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".git-pr-ai.json").write_text("not valid json {{{")

        config = ConfigManager().load()
        assert config.provider == "auto"
        assert "Could not load" in capsys.readouterr().err

    def test_non_object_returns_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".git-pr-ai.json").write_text("[1, 2]")
        assert ConfigManager().load() == Config()


class TestResolveSettings:

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for key in ("GPA_PROVIDER", "GPA_LLM", "GPA_MODEL"):
            monkeypatch.delenv(key, raising=False)

    def test_config_only(self):
        config = Config(provider="gitlab", llm="claude", model="m")
        assert resolve_settings(config) == ("gitlab", "claude", "m")

    def test_env_overrides_config(self, monkeypatch):
        monkeypatch.setenv("GPA_PROVIDER", "github")
        monkeypatch.setenv("GPA_MODEL", "env-model")
        config = Config(provider="gitlab", model="m")
        assert resolve_settings(config) == ("github", "auto", "env-model")

    def test_args_override_env(self, monkeypatch):
        monkeypatch.setenv("GPA_LLM", "ollama")
        assert resolve_settings(Config(), llm="claude")[1] == "claude"


class TestLogging:

    def test_verbose_enables_debug(self, monkeypatch):
        monkeypatch.delenv("GPA_DEBUG", raising=False)
        setup_logging(verbose=True)
        assert logging.getLogger("git_pr_ai").level == logging.DEBUG

    def test_env_enables_debug(self, monkeypatch):
        monkeypatch.setenv("GPA_DEBUG", "1")
        setup_logging()
        assert logging.getLogger("git_pr_ai").level == logging.DEBUG

    def test_default_is_warning(self, monkeypatch):
        monkeypatch.delenv("GPA_DEBUG", raising=False)
        setup_logging()
        assert logging.getLogger("git_pr_ai").level == logging.WARNING
