"""
Shared pytest fixtures for bumpbot tests.

Provides in-memory stand-ins for git/tool subprocesses and the release API so
no test touches the network or runs a real command.
"""

import json
from pathlib import Path
from typing import Any, Optional, Sequence

import pytest

from bumpbot.config import BumpConfig, Target
from bumpbot.pipeline import build_orchestrator
from bumpbot.protocol import CommandResult


class FakeRunner:
    """
    Records every command and answers from a script.

    ``fail(prefix, returncode)`` makes commands starting with ``prefix`` exit
    non-zero; ``explode(prefix)`` makes them raise OSError.  ``git branch -a``
    prints ``remote_branches`` as remote-tracking refs.
    """

    def __init__(self):
        self.calls: list[list[str]] = []
        self.remote_branches: list[str] = []
        self._failures: list[tuple[list[str], int]] = []
        self._errors: list[list[str]] = []

    def fail(self, *prefix: str, returncode: int = 1) -> None:
        self._failures.append((list(prefix), returncode))

    def explode(self, *prefix: str) -> None:
        self._errors.append(list(prefix))

    def run(self, args: Sequence[str], *, capture: bool = False) -> CommandResult:
        argv = list(args)
        self.calls.append(argv)
        for prefix in self._errors:
            if argv[:len(prefix)] == prefix:
                raise FileNotFoundError(2, "No such file or directory", argv[0])
        for prefix, returncode in self._failures:
            if argv[:len(prefix)] == prefix:
                return CommandResult(argv, returncode, "")
        stdout = ""
        if argv[:3] == ["git", "branch", "-a"]:
            lines = ["* master", "  remotes/origin/HEAD -> origin/master", "  remotes/origin/master"]
            lines += [f"  remotes/origin/{b}" for b in self.remote_branches]
            stdout = "\n".join(lines) + "\n"
        return CommandResult(argv, 0, stdout)

    def ran(self, *prefix: str) -> bool:
        return any(c[:len(prefix)] == list(prefix) for c in self.calls)

    def git_calls(self) -> list[list[str]]:
        return [c[1:] for c in self.calls if c and c[0] == "git"]


class FakeReleaseHost:
    """In-memory release API: an upstream feed plus the target repo's releases."""

    def __init__(
        self,
        upstream: Optional[list[dict[str, Any]]] = None,
        target_latest: Optional[dict[str, Any]] = None,
    ):
        self.upstream = upstream if upstream is not None else [
            {"name": "v1.0.1", "tag_name": "v1.0.1"},
            {"name": "v1.0.0", "tag_name": "v1.0.0"},
        ]
        self.target_latest = target_latest if target_latest is not None else {"name": "v0.3.7"}
        self.listed: list[tuple[str, str]] = []
        self.releases: list[dict[str, Any]] = []
        self.pulls: list[dict[str, Any]] = []

    def list_releases(self, owner: str, repo: str) -> list[dict[str, Any]]:
        self.listed.append((owner, repo))
        return self.upstream

    def latest_release(self, owner: str, repo: str) -> dict[str, Any]:
        return self.target_latest

    def create_release(self, owner, repo, *, tag, target_branch, name=None, body=""):
        release = {
            "owner": owner, "repo": repo, "tag": tag,
            "target_branch": target_branch, "name": name, "body": body,
        }
        self.releases.append(release)
        return release

    def create_pull_request(self, owner, repo, *, title, head, base):
        pull = {"owner": owner, "repo": repo, "title": title, "head": head, "base": base}
        self.pulls.append(pull)
        return pull

    @property
    def writes(self) -> int:
        return len(self.releases) + len(self.pulls)


MANIFEST = {
    "https://deno.land/std": {
        "version": "@v1.0.0",
        "modules": ["/testing/asserts.ts", "/fs/mod.ts"],
    },
    "https://denopkg.com/keroxp/deno-couch": {
        "version": "@v0.2.0",
        "modules": ["/mod.ts"],
    },
}


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    """A checked-out Deno module at v1.0.0."""
    (tmp_path / ".denov").write_text("v1.0.0\n")
    (tmp_path / "modules.json").write_text(json.dumps(MANIFEST, indent=2))
    return tmp_path


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def host() -> FakeReleaseHost:
    return FakeReleaseHost()


@pytest.fixture
def target() -> Target:
    return Target(owner="keroxp", repo="servest", token="s3cret-token")


@pytest.fixture
def make_orchestrator(repo_dir, runner, host, target):
    """Factory: orchestrator over the fake collaborators, optional config."""

    def _make(config: Optional[BumpConfig] = None):
        return build_orchestrator(
            config or BumpConfig(),
            target,
            root=repo_dir,
            runner=runner,
            releases=host,
        )

    return _make
