"""Tests for configuration loading."""

import pytest
from pathlib import Path

from aigenda.config import load_config

_ENV_KEYS = [
    "ANTHROPIC_API_KEY",
    "AIGENDA_DATA_DIR",
    "AIGENDA_PROFILE",
    "AIGENDA_MODEL",
    "AIGENDA_TIMEOUT",
    "AIGENDA_MAX_ITERATIONS",
    "AIGENDA_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfig:
    def test_defaults(self):
        config = load_config()
        assert config.agent.max_iterations == 5
        assert config.agent.max_turns == 50
        assert config.agent.max_context_tokens == 8000
        assert config.agent.timeout == 120
        assert config.api_key == ""
        assert config.profile == "default"
        assert config.data_dir.name == "data"

    def test_env_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.setenv("AIGENDA_DATA_DIR", str(tmp_path / "notes"))
        monkeypatch.setenv("AIGENDA_MAX_ITERATIONS", "3")
        monkeypatch.setenv("AIGENDA_MODEL", "claude-test")

        config = load_config()
        assert config.api_key == "sk-test"
        assert config.data_dir == tmp_path / "notes"
        assert config.agent.max_iterations == 3
        assert config.agent.model == "claude-test"

    def test_toml_file(self, tmp_path: Path):
        toml_path = tmp_path / "aigenda.toml"
        toml_path.write_text("""
data_dir = "/tmp/aigenda-notes"
profile = "work"

[agent]
max_iterations = 2
max_turns = 10
max_context_tokens = 500
""")
        config = load_config(toml_path)
        assert config.data_dir == Path("/tmp/aigenda-notes")
        assert config.profile == "work"
        assert config.agent.max_iterations == 2
        assert config.agent.max_turns == 10
        assert config.agent.max_context_tokens == 500

    def test_toml_discovered_in_cwd(self, tmp_path: Path):
        (tmp_path / "aigenda.toml").write_text('profile = "home"\n')
        config = load_config()
        assert config.profile == "home"

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("AIGENDA_MAX_ITERATIONS", "4")

        toml_path = tmp_path / "aigenda.toml"
        toml_path.write_text("""
[agent]
max_iterations = 2
""")
        config = load_config(toml_path)
        assert config.agent.max_iterations == 4  # env wins

    def test_derived_paths(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("AIGENDA_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("AIGENDA_PROFILE", "alice")

        config = load_config()
        assert config.notes_dir == tmp_path / "daily"
        assert config.memory_file == tmp_path / "agent" / "memory-alice.json"

    def test_malformed_toml(self, tmp_path: Path):
        (tmp_path / "aigenda.toml").write_text("profile = \n[agent\n")
        with pytest.raises(ValueError, match="aigenda.toml"):
            load_config()
