"""
Configuration for codeindex.

Resolves the scratch directory and external command vectors once per
process. Sources, highest precedence first:
- LEIN_CODEINDEX_DIR environment variable (scratch directory only)
- .codeindex.yaml in the project root (or an explicit --config file)
- built-in defaults
"""
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from codeindex.errors import ConfigError


INDEX_DIR_ENV = "LEIN_CODEINDEX_DIR"
DEFAULT_INDEX_DIR = ".lein-codeindex"
CONFIG_FILENAME = ".codeindex.yaml"

DEFAULT_CLASSPATH_COMMAND = ('lein', 'classpath')
DEFAULT_EXTRACT_COMMAND = ('jar', 'xf')
DEFAULT_ETAGS_COMMAND = ('etags',)
DEFAULT_CTAGS_COMMAND = ('ctags',)


class ProjectSettings(BaseModel):
    """Schema of the optional .codeindex.yaml file."""
    index_dir: Optional[str] = None
    classpath_command: Optional[Union[str, List[str]]] = None
    extract_command: Optional[Union[str, List[str]]] = None
    etags_command: Optional[Union[str, List[str]]] = None
    ctags_command: Optional[Union[str, List[str]]] = None
    archives: List[str] = Field(default_factory=list)


@dataclass(frozen=True)
class IndexConfig:
    """Resolved settings shared by every codeindex operation."""
    project_root: Path
    index_dir: Path
    classpath_command: Tuple[str, ...] = DEFAULT_CLASSPATH_COMMAND
    extract_command: Tuple[str, ...] = DEFAULT_EXTRACT_COMMAND
    etags_command: Tuple[str, ...] = DEFAULT_ETAGS_COMMAND
    ctags_command: Tuple[str, ...] = DEFAULT_CTAGS_COMMAND
    extra_archives: Tuple[str, ...] = ()

    @property
    def etags_file(self) -> Path:
        """Tag file written by etags (and by ctags in Emacs mode)."""
        return self.project_root / "TAGS"

    @property
    def vi_tags_file(self) -> Path:
        """Tag file written by ctags in vi mode."""
        return self.project_root / "tags"


def _as_command(
    key: str,
    value: Union[str, List[str], None],
    default: Tuple[str, ...],
    source: Path,
) -> Tuple[str, ...]:
    """Accept a YAML list or a shell-style string for a command vector."""
    if value is None:
        return default

    parts = shlex.split(value) if isinstance(value, str) else list(value)
    if not parts:
        raise ConfigError(f"{key} in {source} must not be empty")
    return tuple(parts)


def _resolve_path(value: str, project_root: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = project_root / path
    return path


def load_config_file(config_path: Path) -> ProjectSettings:
    """
    Load and validate the optional project config file.

    Args:
        config_path: Path to the YAML file

    Returns:
        ProjectSettings (all defaults if the file does not exist)

    Raises:
        ConfigError: If the file is not valid YAML or does not match the schema
    """
    if not config_path.exists():
        return ProjectSettings()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return ProjectSettings()
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config in {config_path}: must be a YAML dict")

    try:
        return ProjectSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {config_path}: {e}") from e


def load_config(
    project_root: Path,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> IndexConfig:
    """
    Build the IndexConfig for a project.

    Args:
        project_root: Root directory of the project being indexed
        config_path: Explicit config file (default: <root>/.codeindex.yaml)
        environ: Environment mapping (default: os.environ)

    Returns:
        Resolved IndexConfig

    Raises:
        ConfigError: If the config file is malformed
    """
    environ = os.environ if environ is None else environ
    project_root = Path(project_root).resolve()
    config_path = Path(config_path) if config_path else project_root / CONFIG_FILENAME

    settings = load_config_file(config_path)

    index_dir_value = environ.get(INDEX_DIR_ENV) or settings.index_dir or DEFAULT_INDEX_DIR

    commands: Dict[str, Tuple[str, ...]] = {
        'classpath_command': _as_command(
            'classpath_command', settings.classpath_command, DEFAULT_CLASSPATH_COMMAND, config_path
        ),
        'extract_command': _as_command(
            'extract_command', settings.extract_command, DEFAULT_EXTRACT_COMMAND, config_path
        ),
        'etags_command': _as_command(
            'etags_command', settings.etags_command, DEFAULT_ETAGS_COMMAND, config_path
        ),
        'ctags_command': _as_command(
            'ctags_command', settings.ctags_command, DEFAULT_CTAGS_COMMAND, config_path
        ),
    }

    return IndexConfig(
        project_root=project_root,
        index_dir=_resolve_path(index_dir_value, project_root),
        extra_archives=tuple(str(_resolve_path(a, project_root)) for a in settings.archives),
        **commands,
    )
