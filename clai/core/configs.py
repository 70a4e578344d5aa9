"""Configuration management for clai.

Loads user settings from ~/.config/clai/config.cfg (or $XDG_CONFIG_HOME/clai)
and resolves the per-invocation RunConfig built from CLI flags.

Provides:
    FileConfig  - provider chain, per-provider credentials, safety, context, ui
    RunConfig   - resolved flags for a single `clai run`
"""

import configparser
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Mapping, Optional, TextIO

from dotenv import dotenv_values

from clai.core.errors import ConfigError

DEFAULT_PROVIDER = "openrouter"

# Sections with a fixed meaning; every other section configures a provider.
RESERVED_SECTIONS = {"provider", "safety", "context", "ui"}

MIN_OPTIONS = 1
MAX_OPTIONS = 10


def config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base).expanduser() if base else Path.home() / ".config"
    return root / "clai"


CONFIG_PATH = config_dir() / "config.cfg"


@dataclass
class ProviderSettings:
    api_key: Optional[str] = None
    api_key_env: Optional[str] = None
    model: Optional[str] = None
    endpoint: Optional[str] = None

    def resolve_api_key(self, default_env: str, environ: Mapping[str, str]) -> Optional[str]:
        """
        Resolve the credential for a provider.

        Priority: 1) api_key in config, 2) variable named by api_key_env,
        3) the provider's conventional variable (default_env).
        """
        if self.api_key:
            return self.api_key
        if self.api_key_env and environ.get(self.api_key_env):
            return environ[self.api_key_env]
        return environ.get(default_env) or None


@dataclass
class ProviderConfig:
    default: str = DEFAULT_PROVIDER
    fallback: List[str] = field(default_factory=list)


@dataclass
class SafetyConfig:
    # Empty means "use the built-in defaults".
    dangerous_patterns: List[str] = field(default_factory=list)
    confirm_dangerous: bool = True


@dataclass
class ContextConfig:
    max_files: int = 10
    max_history: int = 3


@dataclass
class UiConfig:
    color: str = "auto"
    debug_log_file: Optional[str] = None


@dataclass
class FileConfig:
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    safety: SafetyConfig = field(default_factory=SafetyConfig)
    context: ContextConfig = field(default_factory=ContextConfig)
    ui: UiConfig = field(default_factory=UiConfig)
    providers: Dict[str, ProviderSettings] = field(default_factory=dict)
    # Values from the optional .env next to the config file.
    dotenv: Dict[str, str] = field(default_factory=dict)

    def provider_settings(self, name: str) -> ProviderSettings:
        return self.providers.get(name, ProviderSettings())

    def environ(self) -> Dict[str, str]:
        """Lookup used for credential resolution; real env wins over .env."""
        merged = dict(self.dotenv)
        merged.update(os.environ)
        return merged

    def with_default_provider(self, name: str) -> "FileConfig":
        return replace(self, provider=replace(self.provider, default=name))


def _split_list(value: str, separators: str = ",\n") -> List[str]:
    items = [value]
    for sep in separators:
        items = [part for item in items for part in item.split(sep)]
    return [item.strip() for item in items if item.strip()]


def _get_bool(section: configparser.SectionProxy, key: str, default: bool) -> bool:
    try:
        return section.getboolean(key, fallback=default)
    except ValueError as e:
        raise ConfigError(f"[{section.name}] {key}: {e}") from e


def _get_int(section: configparser.SectionProxy, key: str, default: int) -> int:
    try:
        return section.getint(key, fallback=default)
    except ValueError as e:
        raise ConfigError(f"[{section.name}] {key}: expected an integer") from e


def _optional(section: configparser.SectionProxy, key: str) -> Optional[str]:
    value = section.get(key, fallback="").strip()
    return value or None


def parse_file_config(cfg: configparser.ConfigParser) -> FileConfig:
    """Build a FileConfig from an already-read parser."""
    config = FileConfig()

    if cfg.has_section("provider"):
        section = cfg["provider"]
        default = section.get("default", fallback=DEFAULT_PROVIDER).strip().lower()
        config.provider = ProviderConfig(
            default=default or DEFAULT_PROVIDER,
            fallback=[p.lower() for p in _split_list(section.get("fallback", fallback=""))],
        )

    if cfg.has_section("safety"):
        section = cfg["safety"]
        config.safety = SafetyConfig(
            # Patterns are regexes and may contain commas: one per line.
            dangerous_patterns=_split_list(
                section.get("dangerous_patterns", fallback=""), separators="\n"
            ),
            confirm_dangerous=_get_bool(section, "confirm_dangerous", True),
        )

    if cfg.has_section("context"):
        section = cfg["context"]
        config.context = ContextConfig(
            max_files=_get_int(section, "max_files", 10),
            max_history=_get_int(section, "max_history", 3),
        )

    if cfg.has_section("ui"):
        section = cfg["ui"]
        color = section.get("color", fallback="auto").strip().lower() or "auto"
        if color not in ("auto", "always", "never"):
            raise ConfigError(f"[ui] color: expected auto, always or never (got {color!r})")
        config.ui = UiConfig(color=color, debug_log_file=_optional(section, "debug_log_file"))

    for name in cfg.sections():
        if name.lower() in RESERVED_SECTIONS:
            continue
        section = cfg[name]
        config.providers[name.lower()] = ProviderSettings(
            api_key=_optional(section, "api_key"),
            api_key_env=_optional(section, "api_key_env"),
            model=_optional(section, "model"),
            endpoint=_optional(section, "endpoint"),
        )

    return config


def load_file_config(path: Optional[Path] = None) -> FileConfig:
    """
    Load the INI config file.

    A missing file is not an error: defaults are returned. A file that cannot
    be read or parsed raises ConfigError.
    """
    path = path or CONFIG_PATH
    cfg = configparser.ConfigParser(interpolation=None)

    if path.exists():
        try:
            with open(path, encoding="utf-8") as handle:
                cfg.read_file(handle)
        except (OSError, configparser.Error) as e:
            raise ConfigError(f"Failed to read {path}: {e}") from e

    config = parse_file_config(cfg)

    env_path = path.parent / ".env"
    if env_path.exists():
        config.dotenv = {k: v for k, v in dotenv_values(env_path).items() if v is not None}

    return config


@dataclass(frozen=True)
class RunConfig:
    """Resolved settings for one `clai run` invocation."""

    instruction: str
    model: Optional[str] = None
    provider: Optional[str] = None
    quiet: bool = False
    verbose: int = 0
    color: str = "auto"
    interactive: bool = False
    force: bool = False
    dry_run: bool = False
    offline: bool = False
    num_options: int = 3
    debug: bool = False
    debug_log_file: Optional[Path] = None

    def __post_init__(self):
        clamped = max(MIN_OPTIONS, min(MAX_OPTIONS, int(self.num_options)))
        object.__setattr__(self, "num_options", clamped)

    def use_color(self, stream: TextIO) -> bool:
        if self.color == "never":
            return False
        if self.color == "always":
            return True
        if os.environ.get("NO_COLOR"):
            return False
        isatty = getattr(stream, "isatty", None)
        return bool(isatty and isatty())

    @property
    def wants_multiple(self) -> bool:
        return self.interactive and self.num_options > 1
