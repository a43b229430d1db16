"""
The bump pipeline.

    resolve versions -> equal? done
                     -> bump branch exists remotely? done
                     -> install runtime, apply version, run tests
                     -> tests pass: commit to mainline, cut a release
                     -> tests fail: commit to bump branch, open a pull request

The duplicate check always runs before anything is mutated, so an
interrupted run can simply be started again.  Nothing is retried.

The release tag is the next patch version after the *target repository's*
latest release, not the upstream version being tracked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .changes import ChangeApplier, install_runtime
from .config import BumpConfig, Target
from .gate import GateRunner
from .guard import DuplicateWorkGuard
from .process import SubprocessRunner
from .protocol import CommandRunner, ReleaseHost
from .release_client import ReleaseClient
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
from .vcs import GitClient, authenticated_remote_url
from .versions import VersionSource
from .workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckReport:
    """Read-only view of what a run would do."""
    context: RunContext
    in_flight: Optional[bool]

    def to_dict(self) -> dict:
        return {
            "current": self.context.current_version,
            "latest": self.context.latest_version,
            "needs_update": self.context.needs_update,
            "branch": self.context.branch,
            "in_flight": self.in_flight,
        }


class PublicationOrchestrator:
    """Drives one bump run from version check to release or pull request."""

    def __init__(
        self,
        config: BumpConfig,
        target: Target,
        *,
        versions: VersionSource,
        guard: DuplicateWorkGuard,
        applier: ChangeApplier,
        gate: GateRunner,
        git: GitClient,
        releases: ReleaseHost,
        runner: CommandRunner,
    ):
        self._config = config
        self._target = target
        self._versions = versions
        self._guard = guard
        self._applier = applier
        self._gate = gate
        self._git = git
        self._releases = releases
        self._runner = runner

    def resolve_context(self) -> RunContext:
        current = self._versions.current_version()
        latest = self._versions.latest_version()
        return RunContext(
            owner=self._target.owner,
            repo=self._target.repo,
            credential=self._target.token,
            current_version=current,
            latest_version=latest,
            component=self._config.component,
        )

    def check(self) -> CheckReport:
        """Resolve versions and look for in-flight work without changing anything."""
        ctx = self.resolve_context()
        in_flight = self._guard.has_in_flight_work(ctx.branch) if ctx.needs_update else None
        return CheckReport(ctx, in_flight)

    def run(self) -> PublicationOutcome:
        ctx = self.resolve_context()
        if not ctx.needs_update:
            logger.info("You are using latest %s: %s", ctx.component, ctx.latest_version)
            return SkippedNoUpdate(ctx.latest_version)

        logger.info("Needs update: current=%s, latest=%s", ctx.current_version, ctx.latest_version)
        if self._guard.has_in_flight_work(ctx.branch):
            return SkippedDuplicate(ctx.branch)

        install_runtime(self._runner, self._config.commands.install, ctx.latest_version)
        self._applier.apply_version(ctx.latest_version)

        if not self._config.gate_on_tests:
            logger.info("Test gate disabled. Opening pull request for review")
            outcome = self.publish_review(ctx)
        else:
            outcome = self.publish(ctx, self._gate.run_tests())
        logger.info("Workflow completed.")
        return outcome

    def publish(self, ctx: RunContext, verdict: Verdict) -> PublicationOutcome:
        if verdict is Verdict.COMPATIBLE:
            logger.info("Test passed. Commit changes and publish new release")
            return self.publish_direct(ctx)
        logger.info("Test failed. Check out to head branch and create new pull request")
        return self.publish_review(ctx)

    def publish_direct(self, ctx: RunContext) -> DirectRelease:
        mainline = self._config.mainline_branch
        self._commit_and_push(ctx, mainline, create_branch=False)
        latest = self._releases.latest_release(ctx.owner, ctx.repo)
        tag = next_patch(latest.get("name") or latest.get("tag_name") or "")
        self._releases.create_release(
            ctx.owner, ctx.repo,
            tag=tag,
            target_branch=mainline,
            name=tag,
            body=ctx.commit_message,
        )
        return DirectRelease(tag)

    def publish_review(self, ctx: RunContext) -> PullRequestOpened:
        self._commit_and_push(ctx, ctx.branch, create_branch=True)
        self._releases.create_pull_request(
            ctx.owner, ctx.repo,
            title=ctx.commit_message,
            head=f"{ctx.owner}:{ctx.branch}",
            base=self._config.mainline_branch,
        )
        return PullRequestOpened(ctx.branch)

    def _commit_and_push(self, ctx: RunContext, branch: str, *, create_branch: bool) -> None:
        self._git.configure_identity(self._config.bot_name, self._config.bot_email)
        if create_branch:
            self._git.checkout_new_branch(branch)
        self._git.add_all()
        self._git.commit(ctx.commit_message)
        url = authenticated_remote_url(ctx.owner, ctx.repo, ctx.credential, self._config.git_host)
        self._git.set_remote_url(url, secret=ctx.credential)
        self._git.push(branch)


def build_orchestrator(
    config: BumpConfig,
    target: Target,
    *,
    root: Path | str = ".",
    runner: Optional[CommandRunner] = None,
    releases: Optional[ReleaseHost] = None,
) -> PublicationOrchestrator:
    """Wire the default collaborators (subprocess, git, httpx) for ``root``."""
    workspace = Workspace(root)
    if runner is None:
        runner = SubprocessRunner(workspace.root)
    if releases is None:
        releases = ReleaseClient(config.api_url, target.token, timeout=config.http_timeout)
    git = GitClient(runner)
    return PublicationOrchestrator(
        config,
        target,
        versions=VersionSource(
            workspace, releases,
            marker_file=config.marker_file,
            upstream=(config.upstream_owner, config.upstream_repo),
        ),
        guard=DuplicateWorkGuard(git),
        applier=ChangeApplier(
            workspace, runner,
            marker_file=config.marker_file,
            manifest_file=config.manifest_file,
            manifest_key=config.manifest_dependency_key,
            manifest_version_prefix=config.manifest_version_prefix,
            sync_command=config.commands.sync,
            format_command=config.commands.format,
        ),
        gate=GateRunner(runner, config.commands.test),
        git=git,
        releases=releases,
        runner=runner,
    )
