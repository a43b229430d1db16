"""
Git operations used by the bump pipeline.

Every call blocks until git exits.  A non-zero exit, or git not being
runnable at all, raises VcsError.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .errors import VcsError
from .protocol import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

REMOTE = "origin"


def authenticated_remote_url(owner: str, repo: str, token: str, host: str = "github.com") -> str:
    """HTTPS push URL with the credential embedded."""
    return f"https://{owner}:{token}@{host}/{owner}/{repo}.git"


class GitClient:
    """Thin wrapper over ``git`` run through a CommandRunner."""

    def __init__(self, runner: CommandRunner, *, executable: str = "git"):
        self._runner = runner
        self._git = executable

    def run(self, *args: str, capture: bool = False, redact: Sequence[str] = ()) -> CommandResult:
        """Run ``git <args>``; raise VcsError on failure.

        Strings in ``redact`` are masked in the error message.
        """
        argv = [self._git, *args]
        try:
            result = self._runner.run(argv, capture=capture)
        except OSError as e:
            raise VcsError(_mask(argv, redact), None, str(e)) from e
        if not result.ok:
            raise VcsError(_mask(argv, redact), result.returncode)
        return result

    def fetch_prune(self) -> None:
        """Refresh remote-tracking refs, dropping ones deleted upstream."""
        self.run("fetch", "-p")

    def list_branches(self) -> list[str]:
        """All local and remote-tracking branch names, as ``git branch -a`` prints them."""
        out = self.run("branch", "-a", capture=True).stdout
        branches = []
        for line in out.splitlines():
            name = line.lstrip("* ").strip()
            # "remotes/origin/HEAD -> origin/master"
            name = name.split(" -> ", 1)[0]
            if name:
                branches.append(name)
        return branches

    def configure_identity(self, name: str, email: str) -> None:
        self.run("config", "--local", "user.email", email)
        self.run("config", "--local", "user.name", name)

    def checkout_new_branch(self, branch: str) -> None:
        self.run("checkout", "-b", branch)

    def add_all(self) -> None:
        self.run("add", ".")

    def commit(self, message: str) -> None:
        self.run("commit", "-m", message)

    def set_remote_url(self, url: str, *, secret: str = "") -> None:
        self.run("remote", "set-url", REMOTE, url, redact=(secret,) if secret else ())

    def push(self, branch: str) -> None:
        self.run("push", REMOTE, branch)


def _mask(argv: list[str], secrets: Sequence[str]) -> list[str]:
    if not secrets:
        return argv
    masked = []
    for arg in argv:
        for s in secrets:
            if s:
                arg = arg.replace(s, "***")
        masked.append(arg)
    return masked
