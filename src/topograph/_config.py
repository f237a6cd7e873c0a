"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from ._errors import ConfigError

_BOOL_KEYS = ("stop_on_first_error", "finalize_on_failure", "ignore_case")


@dataclass(slots=True, frozen=True)
class RunnerConfig:
    """Settings for processor runs and the command line.

    Attributes:
        stop_on_first_error: Stop processing at the first processor that fails.
        finalize_on_failure: Run the finalize hook even if some processors failed.
            It never runs when sorting failed.
        ignore_case: Compare string values case-insensitively when building
            collections from graph documents.
        project_root: Directory holding the pyproject.toml the config came from.

    """

    stop_on_first_error: bool = False
    finalize_on_failure: bool = False
    ignore_case: bool = False
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def load_config(pyproject_path: Path) -> RunnerConfig:
    """Load and validate [tool.topograph] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed RunnerConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("topograph", {})
    if not isinstance(section, dict):
        msg = "Invalid [tool.topograph]: expected a table"
        raise ConfigError(msg)

    unknown = sorted(set(section) - set(_BOOL_KEYS))
    if unknown:
        msg = f"Unknown [tool.topograph] keys: {', '.join(unknown)}"
        raise ConfigError(msg)

    flags: dict[str, bool] = {}
    for key in _BOOL_KEYS:
        if key not in section:
            continue
        value = section[key]
        if not isinstance(value, bool):
            msg = f"Invalid [tool.topograph].{key}: expected true or false"
            raise ConfigError(msg)
        flags[key] = value

    return RunnerConfig(**flags, project_root=project_root)


def get_config() -> RunnerConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        RunnerConfig (defaults if no pyproject.toml or no [tool.topograph] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return RunnerConfig()
    return load_config(pyproject_path)
