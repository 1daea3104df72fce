"""Configuration management for chatdoc."""

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from .errors import ConfigError

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python < 3.11


def _find_repo_root(start_dir: Path) -> Path:
    """Find repository root by walking upward looking for .git or pyproject.toml."""
    current_dir = start_dir

    while True:
        if (current_dir / ".git").exists() or (current_dir / "pyproject.toml").exists():
            return current_dir

        parent_dir = current_dir.parent

        # Stop at filesystem root and fall back to the starting directory
        if parent_dir == current_dir:
            return start_dir

        current_dir = parent_dir


def _load_repo_config_data(repo_root: Path) -> Optional[dict]:
    """Load repo config data from .chatdoc/config.toml if it exists."""
    config_file = repo_root / ".chatdoc" / "config.toml"

    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        # If config file is malformed, ignore it
        return None


def _nested_get(data: Optional[dict], keys: list[str]) -> Any:
    """Safely get a nested repo config value."""
    current: Any = data or {}
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


class ChatDocConfig(BaseModel):
    """Settings used when sending a transcript."""

    auth_token: Optional[str] = Field(default=None, description="Caller-local auth token")
    auth_token_file: Optional[Path] = Field(
        default=None,
        description="File whose first line is the default auth token",
    )
    wrap_width: int = Field(default=80, ge=1)
    request_timeout_seconds: float = Field(default=300.0, gt=0)

    model_config = {"frozen": False}

    @classmethod
    def from_env(cls, start_dir: Optional[Path] = None) -> "ChatDocConfig":
        """Load configuration from environment variables, repo config, or defaults.

        Environment variables win over ``.chatdoc/config.toml`` in the
        repository containing ``start_dir`` (default: the current directory).
        """
        repo_root = _find_repo_root(start_dir or Path.cwd())
        repo_config = _load_repo_config_data(repo_root)

        token_file = os.environ.get("CHATDOC_AUTH_TOKEN_FILE") or _nested_get(repo_config, ["auth", "token_file"])
        wrap_width = os.environ.get("CHATDOC_WRAP_WIDTH") or _nested_get(repo_config, ["output", "wrap_width"])
        timeout = os.environ.get("CHATDOC_REQUEST_TIMEOUT") or _nested_get(
            repo_config, ["server", "timeout_seconds"]
        )

        try:
            return cls(
                auth_token=os.environ.get("CHATDOC_AUTH_TOKEN") or None,
                auth_token_file=Path(str(token_file)).expanduser() if token_file else None,
                wrap_width=int(wrap_width) if wrap_width else 80,
                request_timeout_seconds=float(timeout) if timeout else 300.0,
            )
        except (TypeError, ValueError) as e:
            # pydantic.ValidationError subclasses ValueError
            raise ConfigError(f"Invalid chatdoc configuration: {e}") from e
