"""
Configuration management for bumpbot.

The configuration is an optional TOML file (``bumpbot.toml``) in the working
tree.  It describes which component is tracked, which files carry its
version, the commands to run, and how the run is published.

Precedence (highest to lowest):
1. Command-line options
2. Environment variables (BUMPBOT_*)
3. TOML config file
4. Built-in defaults (track Deno in a Deno module repository)
"""

import os
import re
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import tomli_w

from .errors import ConfigError

CONFIG_FILENAME = "bumpbot.toml"
CONFIG_VERSION = 1

CREDENTIAL_SOURCES = ("args", "env")

_REPOSITORY_PATTERN = re.compile(r'^([^/]+)/([^/]+)$')

# Download the Deno installer to a temp file (so it never lands in the working
# tree) and install the requested version.  The version is passed as $1.
DENO_INSTALL_SCRIPT = (
    'set -e; f=$(mktemp); '
    'curl -fsSL https://deno.land/x/install/install.sh -o "$f"; '
    'sh "$f" "$1"; rm -f "$f"'
)


@dataclass
class CommandsConfig:
    """External tools run during a bump.  An empty list disables a step."""
    sync: list[str] = field(default_factory=lambda: [
        "deno", "run", "-A", "https://denopkg.com/keroxp/dink@v0.6.2/main.ts",
    ])
    format: list[str] = field(default_factory=lambda: ["deno", "fmt"])
    test: list[str] = field(default_factory=lambda: ["deno", "test", "-A"])
    install: list[str] = field(default_factory=lambda: [
        "sh", "-c", DENO_INSTALL_SCRIPT, "sh", "{version}",
    ])


@dataclass
class BumpConfig:
    """Complete bumpbot configuration."""
    version: int = CONFIG_VERSION

    # What is tracked
    component: str = "deno"
    upstream_owner: str = "denoland"
    upstream_repo: str = "deno"
    marker_file: str = ".denov"
    manifest_file: str = "modules.json"
    manifest_dependency_key: str = "https://deno.land/std"
    manifest_version_prefix: str = "@"

    # Where it is published
    mainline_branch: str = "master"
    api_url: str = "https://api.github.com"
    git_host: str = "github.com"
    http_timeout: Optional[float] = None  # None = wait indefinitely

    # How run parameters are supplied: positional args or environment
    credential_source: str = "args"
    repository_env: str = "GITHUB_REPOSITORY"
    token_env: str = "GITHUB_TOKEN"

    # Publication policy
    gate_on_tests: bool = True
    bot_name: str = "Github Actions"
    bot_email: str = "actions@github.com"

    commands: CommandsConfig = field(default_factory=CommandsConfig)

    # Where this config was loaded from (None = defaults)
    path: Optional[Path] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.credential_source not in CREDENTIAL_SOURCES:
            raise ConfigError(
                f"credential_source must be one of {', '.join(CREDENTIAL_SOURCES)} "
                f"(got {self.credential_source!r})"
            )


@dataclass(frozen=True)
class Target:
    """Repository being bumped, and the credential to publish with."""
    owner: str
    repo: str
    token: str

    def __repr__(self) -> str:
        return f"Target(owner={self.owner!r}, repo={self.repo!r})"


# -----------------------------------------------------------------------------
# Loading and saving
# -----------------------------------------------------------------------------

_SCALAR_KEYS = {f.name for f in fields(BumpConfig)} - {"commands", "path", "version"}
_BOOL_KEYS = {"gate_on_tests"}
_NUMBER_KEYS = {"http_timeout"}


def _check_scalar(key: str, value: Any) -> None:
    # bool is an int subclass, so it is excluded from the numeric checks
    if key in _BOOL_KEYS:
        ok = isinstance(value, bool)
        expected = "a boolean"
    elif key in _NUMBER_KEYS:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        expected = "a number"
    elif key == "version":
        ok = isinstance(value, int) and not isinstance(value, bool)
        expected = "an integer"
    else:
        ok = isinstance(value, str)
        expected = "a string"
    if not ok:
        raise ConfigError(f"{key} must be {expected} (got {value!r})")


def load_config(path: Path) -> BumpConfig:
    """
    Load configuration from a TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the file is invalid
    """
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config {path}: {e}") from e

    section = data.get("bumpbot", {})
    version = section.get("version", CONFIG_VERSION)
    _check_scalar("version", version)
    if version > CONFIG_VERSION:
        raise ConfigError(f"Config version {version} is newer than supported ({CONFIG_VERSION})")

    unknown = set(section) - _SCALAR_KEYS - {"version"}
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {', '.join(sorted(unknown))}")

    commands_section = data.get("commands", {})
    commands = CommandsConfig()
    for name in ("sync", "format", "test", "install"):
        if name in commands_section:
            value = commands_section[name]
            if not isinstance(value, list) or not all(isinstance(a, str) for a in value):
                raise ConfigError(f"commands.{name} must be a list of strings")
            setattr(commands, name, value)

    values = {k: v for k, v in section.items() if k in _SCALAR_KEYS}
    for key, value in values.items():
        _check_scalar(key, value)
    return BumpConfig(version=version, commands=commands, path=path, **values)


def save_config(config: BumpConfig, path: Path) -> None:
    """Write ``config`` as TOML.  ``None`` values are omitted."""
    section: dict[str, Any] = {"version": config.version}
    for name in sorted(_SCALAR_KEYS):
        value = getattr(config, name)
        if value is not None:
            section[name] = value
    data = {
        "bumpbot": section,
        "commands": {
            "sync": config.commands.sync,
            "format": config.commands.format,
            "test": config.commands.test,
            "install": config.commands.install,
        },
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        tomli_w.dump(data, f)


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"{name} must be a boolean (got {value!r})")


def apply_env_overrides(config: BumpConfig, environ: Mapping[str, str]) -> BumpConfig:
    """Return a copy of ``config`` with BUMPBOT_* environment values applied."""
    changes: dict[str, Any] = {}
    for name, key in (
        ("BUMPBOT_COMPONENT", "component"),
        ("BUMPBOT_MANIFEST_KEY", "manifest_dependency_key"),
        ("BUMPBOT_MAINLINE_BRANCH", "mainline_branch"),
        ("BUMPBOT_API_URL", "api_url"),
        ("BUMPBOT_CREDENTIAL_SOURCE", "credential_source"),
    ):
        if environ.get(name):
            changes[key] = environ[name]
    if environ.get("BUMPBOT_GATE_ON_TESTS"):
        changes["gate_on_tests"] = _parse_bool("BUMPBOT_GATE_ON_TESTS", environ["BUMPBOT_GATE_ON_TESTS"])
    if not changes:
        return config
    return replace(config, **changes)


def resolve_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> BumpConfig:
    """
    Build the effective configuration for a run.

    An explicit ``config_path`` must exist; otherwise ``bumpbot.toml`` in the
    current directory is used when present.
    """
    if environ is None:
        environ = os.environ
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config not found: {config_path}")
        config = load_config(config_path)
    elif Path(CONFIG_FILENAME).exists():
        config = load_config(Path(CONFIG_FILENAME))
    else:
        config = BumpConfig()
    return apply_env_overrides(config, environ)


def parse_repository(repository: str) -> tuple[str, str]:
    """Split ``owner/repo``."""
    if not _REPOSITORY_PATTERN.match(repository):
        raise ConfigError(f"repository must be :owner/:repo style: {repository}")
    owner, repo = repository.split("/")
    return owner, repo


def resolve_target(
    config: BumpConfig,
    repository: Optional[str] = None,
    token: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Target:
    """
    Resolve owner, repo and token from positional arguments or environment,
    according to ``config.credential_source``.
    """
    if config.credential_source == "env":
        if environ is None:
            environ = os.environ
        repository = environ.get(config.repository_env)
        token = environ.get(config.token_env)
        if not repository or not token:
            raise ConfigError(
                f"Set {config.repository_env} (:owner/:repository) and {config.token_env}"
            )
    elif not repository or not token:
        raise ConfigError("Usage: bumpbot run :owner/:repository TOKEN")
    owner, repo = parse_repository(repository)
    return Target(owner=owner, repo=repo, token=token)
