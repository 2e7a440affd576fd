"""Configuration loading from environment variables and aigenda.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_DATA_DIR = Path.home() / ".aigenda" / "data"
_CONFIG_FILENAME = "aigenda.toml"


@dataclass
class AgentConfig:
    """Configuration for the agent loop and its completion client."""

    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 1024
    timeout: int = 120
    max_iterations: int = 5
    max_turns: int = 50
    max_context_tokens: int = 8000


@dataclass
class AigendaConfig:
    """Top-level aigenda configuration."""

    agent: AgentConfig = field(default_factory=AgentConfig)
    api_key: str = ""
    data_dir: Path = _DEFAULT_DATA_DIR
    profile: str = "default"
    log_level: str = "WARNING"

    @property
    def notes_dir(self) -> Path:
        return self.data_dir / "daily"

    @property
    def memory_file(self) -> Path:
        return self.data_dir / "agent" / f"memory-{self.profile}.json"


def load_config(config_path: Path | None = None) -> AigendaConfig:
    """Load configuration from environment variables and optional aigenda.toml.

    Priority: environment variables > aigenda.toml > defaults.
    The API key is only ever taken from the environment. Raises ValueError for
    an unparsable config file or a non-numeric numeric setting.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = _read_toml(config_path)
    else:
        # Search current dir and ~/.aigenda/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".aigenda" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = _read_toml(candidate)
                break

    agent_data = file_data.get("agent", {})
    defaults = AgentConfig()

    data_dir = os.getenv("AIGENDA_DATA_DIR", file_data.get("data_dir"))

    config = AigendaConfig(
        agent=AgentConfig(
            model=os.getenv("AIGENDA_MODEL", agent_data.get("model", defaults.model)),
            max_tokens=int(agent_data.get("max_tokens", defaults.max_tokens)),
            timeout=int(os.getenv("AIGENDA_TIMEOUT", agent_data.get("timeout", defaults.timeout))),
            max_iterations=int(
                os.getenv(
                    "AIGENDA_MAX_ITERATIONS",
                    agent_data.get("max_iterations", defaults.max_iterations),
                )
            ),
            max_turns=int(agent_data.get("max_turns", defaults.max_turns)),
            max_context_tokens=int(
                agent_data.get("max_context_tokens", defaults.max_context_tokens)
            ),
        ),
        api_key=os.getenv("ANTHROPIC_API_KEY", ""),
        data_dir=Path(data_dir).expanduser() if data_dir else _DEFAULT_DATA_DIR,
        profile=os.getenv("AIGENDA_PROFILE", file_data.get("profile", "default")),
        log_level=os.getenv("AIGENDA_LOG_LEVEL", file_data.get("log_level", "WARNING")),
    )
    return config


def _read_toml(path: Path) -> dict:
    try:
        return tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid config file {path}: {e}") from e
