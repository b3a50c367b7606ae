"""Configuration loading for docsync (.docsync.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".docsync.yml"

DEFAULT_EXTENSIONS: tuple[str, ...] = (
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".py",
    ".rb",
    ".java",
    ".go",
    ".cpp",
    ".c",
    ".h",
    ".hpp",
    ".md",
    ".txt",
)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LLMConfig:
    """Text-generation settings from .docsync.yml."""

    provider: Optional[str] = None
    model: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = None


@dataclass
class StoreConfig:
    """Locations of the durable snapshot and documentation stores."""

    dir: str = ".docsync"
    tree_file: str = "tree.json"
    docs_file: str = "docs.json"


@dataclass
class DocSyncConfig:
    """Represents the high-level settings defined in .docsync.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    include_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_paths: List[str] = field(default_factory=list)
    write_back: bool = False
    preview_lines: int = 5
    log_file: Optional[Path] = None


@dataclass
class DocSyncContext:
    """Explicit per-run context handed to the orchestrator and stores."""

    root: Path
    config: DocSyncConfig

    @classmethod
    def for_workspace(cls, path: str | Path) -> "DocSyncContext":
        root = Path(path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Workspace path not found: {path}")
        if not root.is_dir():
            raise NotADirectoryError(f"Workspace path is not a directory: {path}")
        return cls(root=root, config=load_config(root))

    @property
    def state_dir(self) -> Path:
        return self.root / self.config.store.dir

    @property
    def tree_path(self) -> Path:
        return self.state_dir / self.config.store.tree_file

    @property
    def docs_path(self) -> Path:
        return self.state_dir / self.config.store.docs_file

    @property
    def lock_path(self) -> Path:
        return self.state_dir / "lock"


def load_config(config_path: Path) -> DocSyncConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocSyncConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        provider=_as_str(llm_data.get("provider")),
        model=_as_str(llm_data.get("model")),
        api_key=_as_str(llm_data.get("api_key")),
        base_url=_as_str(llm_data.get("base_url")),
        temperature=_as_float(llm_data.get("temperature")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
    )

    store_data = _as_dict(data.get("store"))
    store = StoreConfig()
    if store_data:
        store.dir = _as_str(store_data.get("dir")) or store.dir
        store.tree_file = _as_str(store_data.get("tree_file")) or store.tree_file
        store.docs_file = _as_str(store_data.get("docs_file")) or store.docs_file

    extensions = _as_str_list(data.get("include_extensions"))
    include_extensions = (
        [_normalise_extension(ext) for ext in extensions] if extensions else list(DEFAULT_EXTENSIONS)
    )

    preview_lines = _as_int(data.get("preview_lines"))
    if preview_lines is None or preview_lines < 1:
        preview_lines = 5

    log_file_str = _as_str(data.get("log_file"))
    log_file = root / log_file_str if log_file_str else None

    return DocSyncConfig(
        root=root,
        llm=llm,
        store=store,
        include_extensions=include_extensions,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        write_back=_as_bool(data.get("write_back")) or False,
        preview_lines=preview_lines,
        log_file=log_file,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
