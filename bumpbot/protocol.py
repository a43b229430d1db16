"""
Protocol definitions for the collaborators the bump pipeline calls.

Defines interface contracts at two levels:
- CommandRunner: runs a program and reports its exit status (git, deno, ...)
- ReleaseHost: the release-hosting API (GitHub releases and pull requests)

The default implementations are SubprocessRunner and ReleaseClient; tests
substitute in-memory fakes.
"""

from typing import Any, NamedTuple, Optional, Protocol, Sequence, runtime_checkable


class CommandResult(NamedTuple):
    """Structured result of one finished command."""
    args: list[str]
    returncode: int
    stdout: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    """
    Runs a command to completion.

    Raises OSError when the program cannot be started; a non-zero exit is
    reported through the result, never raised.
    """

    def run(
        self,
        args: Sequence[str],
        *,
        capture: bool = False,
    ) -> CommandResult: ...


@runtime_checkable
class ReleaseHost(Protocol):
    """
    The release-hosting API surface the pipeline consumes.

    Implemented by:
    - ReleaseClient (httpx client for the GitHub REST API)
    """

    def list_releases(self, owner: str, repo: str) -> list[dict[str, Any]]: ...

    def latest_release(self, owner: str, repo: str) -> dict[str, Any]: ...

    def create_release(
        self,
        owner: str,
        repo: str,
        *,
        tag: str,
        target_branch: str,
        name: Optional[str] = None,
        body: str = "",
    ) -> dict[str, Any]: ...

    def create_pull_request(
        self,
        owner: str,
        repo: str,
        *,
        title: str,
        head: str,
        base: str,
    ) -> dict[str, Any]: ...
