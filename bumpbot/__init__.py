"""
bumpbot

Watches an upstream runtime's releases and carries a new version into a
repository: update the version marker and dependency manifest, run the test
suite, then either commit to mainline and cut a release (tests pass) or push
a ``botbump-<component>@<version>`` branch and open a pull request (tests
fail).  Re-running while that branch exists is a no-op.

Quick Start:
    from bumpbot import BumpConfig, Target, build_orchestrator

    config = BumpConfig()               # tracks denoland/deno by default
    target = Target("owner", "repo", token)
    outcome = build_orchestrator(config, target).run()

CLI Usage:
    bumpbot run owner/repo TOKEN
    bumpbot check owner/repo TOKEN --json
    bumpbot next-patch v1.2.3

Environment Variables:
    GITHUB_REPOSITORY, GITHUB_TOKEN  - run parameters when credential_source = "env"
    BUMPBOT_CONFIG                   - config file path (default ./bumpbot.toml)
    BUMPBOT_VERBOSE=1                - debug logging
    BUMPBOT_HOME                     - error log directory (default ~/.bumpbot)
"""

from .config import BumpConfig, CommandsConfig, Target, load_config, resolve_config, resolve_target
from .errors import (
    BumpError,
    ConfigError,
    FormatError,
    InvalidSemverError,
    ToolError,
    UpstreamError,
    VcsError,
)
from .pipeline import PublicationOrchestrator, build_orchestrator
from .semver import next_patch
from .types import (
    DirectRelease,
    PublicationOutcome,
    PullRequestOpened,
    RunContext,
    SkippedDuplicate,
    SkippedNoUpdate,
    Verdict,
)

__version__ = "0.1.0"
__all__ = [
    "BumpConfig",
    "CommandsConfig",
    "Target",
    "load_config",
    "resolve_config",
    "resolve_target",
    "BumpError",
    "ConfigError",
    "FormatError",
    "InvalidSemverError",
    "ToolError",
    "UpstreamError",
    "VcsError",
    "PublicationOrchestrator",
    "build_orchestrator",
    "next_patch",
    "DirectRelease",
    "PublicationOutcome",
    "PullRequestOpened",
    "RunContext",
    "SkippedDuplicate",
    "SkippedNoUpdate",
    "Verdict",
]
