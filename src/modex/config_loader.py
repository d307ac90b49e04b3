"""
Config loader - YAML files or the [tool.modex] table of pyproject.toml
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from .module_index import DEFAULT_EXCLUDE
from .resolver import DEFAULT_MARKER

try:
    import yaml
except ImportError:
    yaml = None

try:  # py3.11+
    import tomllib as tomli
except ImportError:
    try:
        import tomli
    except ImportError:
        tomli = None


CONFIG_CANDIDATES = [
    "modex.yaml",
    "modex.yml",
    ".modex.yaml",
    ".modex.yml",
    "pyproject.toml",  # [tool.modex]
]


@dataclass
class ModexConfig:
    """Effective settings for one run. CLI flags override file values."""

    root: Optional[str] = None
    marker: str = DEFAULT_MARKER
    self_names: List[str] = field(default_factory=lambda: ["self", "cls"])
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    explain: bool = False
    format: str = "text"


def load_config(config_path: Optional[Path] = None, cwd: Optional[Path] = None) -> ModexConfig:
    """
    Load the modex configuration

    Args:
        config_path: explicit config file; looked up automatically when None
        cwd: directory searched by the automatic lookup (default: current directory)

    Returns:
        ModexConfig: loaded settings (defaults when no file is found)
    """
    if config_path:
        return _load_config_file(Path(config_path))

    found = find_config_file(cwd)
    if found:
        logger.debug("Using config file {}", found)
        return _load_config_file(found)
    return ModexConfig()


def find_config_file(cwd: Optional[Path] = None) -> Optional[Path]:
    """First config file in CONFIG_CANDIDATES order."""
    base = Path(cwd) if cwd else Path(".")
    for name in CONFIG_CANDIDATES:
        candidate = base / name
        if not candidate.exists():
            continue
        if candidate.name == "pyproject.toml":
            if _has_modex_config(candidate):
                return candidate
            continue
        return candidate
    return None


def _load_config_file(config_path: Path) -> ModexConfig:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix in [".yaml", ".yml"]:
        return _load_yaml_config(config_path)
    elif suffix == ".toml":
        return _load_toml_config(config_path)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def _load_yaml_config(config_path: Path) -> ModexConfig:
    if yaml is None:
        raise ImportError("PyYAML is required to read YAML config files: pip install pyyaml")

    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data:
        return ModexConfig()
    return _parse_config_data(data)


def _load_toml_config(config_path: Path) -> ModexConfig:
    if tomli is None:
        raise ImportError("tomli is required to read TOML config files: pip install tomli")

    with config_path.open("rb") as f:
        data = tomli.load(f)

    # pyproject.toml layout
    if "tool" in data and "modex" in data["tool"]:
        data = data["tool"]["modex"]
    return _parse_config_data(data)


def _has_modex_config(pyproject_path: Path) -> bool:
    if tomli is None:
        return False
    try:
        with pyproject_path.open("rb") as f:
            data = tomli.load(f)
    except (OSError, ValueError):
        return False
    return "tool" in data and "modex" in data["tool"]


def _parse_config_data(data: Dict[str, Any]) -> ModexConfig:
    config = ModexConfig()

    if "root" in data and data["root"]:
        config.root = str(data["root"])
    if "marker" in data and data["marker"]:
        config.marker = str(data["marker"]).strip()
    if isinstance(data.get("self_names"), list):
        config.self_names = [str(x) for x in data["self_names"]]
    if isinstance(data.get("exclude"), list):
        config.exclude = [str(x) for x in data["exclude"]]
    if "explain" in data:
        config.explain = bool(data["explain"])
    if "format" in data:
        val = str(data["format"]).strip().lower()
        if val in {"text", "json"}:
            config.format = val
    return config


def create_example_config() -> str:
    """Contents of the example modex.yaml."""
    return """# modex configuration
# Source root that contains the top-level packages (default: current directory)
# root: "src"

# A class counts as a model when its module path contains this exact component
marker: "models"

# Receiver names that refer to the enclosing class (self.m(), cls.m())
self_names:
  - "self"
  - "cls"

# fnmatch globs (relative to root, written as "**/dir/**") skipped while indexing
exclude:
  - "**/.git/**"
  - "**/.venv/**"
  - "**/venv/**"
  - "**/.tox/**"
  - "**/__pycache__/**"
  - "**/node_modules/**"

# Print the call-graph nodes that referenced each model
explain: false

# Output format: text | json
format: "text"
"""


def save_example_config(output_path: Optional[Path] = None, force: bool = False) -> Path:
    if output_path is None:
        output_path = Path("modex.yaml")
    if output_path.exists() and not force:
        raise FileExistsError(f"Config file already exists: {output_path}")
    output_path.write_text(create_example_config(), encoding="utf-8")
    return output_path
