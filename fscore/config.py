"""
Firesync configuration (firesync.json).

    {
      "input": "src",
      "output": "build",
      "darklua_configuration": ".darklua.json"
    }

Server settings are optional and default to the values below.
"""
import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from fscore.errors import FiresyncError

CONFIG_FILE = "firesync.json"
CONFIG_PATHS = [CONFIG_FILE, os.path.join("~", ".firesync", CONFIG_FILE)]


class ConfigError(FiresyncError):
    """firesync.json is missing, unreadable or invalid."""
    title = "Configuration error"


class FiresyncConfig(BaseModel):
    """Settings shared by `firesync build` and `firesync serve`."""
    input: Path = Path("src")
    output: Path = Path("build")
    darklua_configuration: Path = Path(".darklua.json")
    darklua: str = "darklua"
    recursive: bool = False

    # Development server
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=0, le=65535)
    local_host: str = "localhost"
    tunnel_server: str = "https://localtunnel.me"
    tunnel_max_conn: int = Field(default=5, ge=0)
    debounce_seconds: float = Field(default=2.0, gt=0)
    debounce_max_wait: float = Field(default=10.0, gt=0)
    queue_size: int = Field(default=32, ge=1)


def find_config(paths=None) -> Optional[Path]:
    """Return the first existing config file from the search paths."""
    for p in paths or CONFIG_PATHS:
        candidate = Path(os.path.expanduser(p))
        if candidate.is_file():
            return candidate
    return None


def load_config(path=None) -> FiresyncConfig:
    """
    Load firesync.json.

    Args:
        path: Explicit config file. When None the search paths are tried and
            defaults are used if none exists.

    Raises:
        ConfigError: The file can't be read or doesn't validate
    """
    if path is None:
        path = find_config()
        if path is None:
            return FiresyncConfig()

    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e.strerror or e}", file_name=str(path))
    except json.JSONDecodeError as e:
        raise ConfigError(e.msg, file_name=str(path), line_number=e.lineno, column=e.colno)

    try:
        return FiresyncConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(problems, file_name=str(path))


def write_default_config(path=CONFIG_FILE) -> Path:
    """Write a firesync.json with every default filled in."""
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(FiresyncConfig().model_dump(mode="json"), f, indent=2)
    return path
