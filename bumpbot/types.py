"""
Data types for a bump run.
"""

import enum
from dataclasses import dataclass
from typing import Union

# A version identifier such as "v1.2.3" or "1.2.3-rc.1"
VersionTag = str

BRANCH_PREFIX = "botbump"
COMMIT_PREFIX = "bump"


def bump_branch_name(component: str, version: VersionTag) -> str:
    """Work-in-progress branch for a bump: ``botbump-<component>@<version>``."""
    return f"{BRANCH_PREFIX}-{component}@{version}"


def bump_commit_message(component: str, version: VersionTag) -> str:
    """Commit message, PR title and release body: ``bump: <component>@<version>``."""
    return f"{COMMIT_PREFIX}: {component}@{version}"


class Verdict(enum.Enum):
    """Outcome of the test gate."""
    COMPATIBLE = "compatible"
    INCOMPATIBLE = "incompatible"

    @classmethod
    def from_success(cls, passed: bool) -> "Verdict":
        return cls.COMPATIBLE if passed else cls.INCOMPATIBLE


@dataclass(frozen=True)
class RunContext:
    """Resolved parameters of one run. Never mutated after creation."""
    owner: str
    repo: str
    credential: str
    current_version: VersionTag
    latest_version: VersionTag
    component: str = "deno"

    @property
    def needs_update(self) -> bool:
        return self.current_version != self.latest_version

    @property
    def branch(self) -> str:
        return bump_branch_name(self.component, self.latest_version)

    @property
    def commit_message(self) -> str:
        return bump_commit_message(self.component, self.latest_version)

    def __repr__(self) -> str:
        # Keep the credential out of logs and tracebacks
        return (
            f"RunContext(owner={self.owner!r}, repo={self.repo!r}, "
            f"current_version={self.current_version!r}, "
            f"latest_version={self.latest_version!r}, component={self.component!r})"
        )


# -----------------------------------------------------------------------------
# Publication outcomes
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DirectRelease:
    """Changes committed to mainline and a release created."""
    tag: VersionTag
    kind = "direct_release"

    def describe(self) -> str:
        return f"Released {self.tag}"

    def to_dict(self) -> dict:
        return {"outcome": self.kind, "tag": self.tag}


@dataclass(frozen=True)
class PullRequestOpened:
    """Changes pushed to a bump branch and a pull request opened."""
    branch: str
    kind = "pull_request_opened"

    def describe(self) -> str:
        return f"Opened pull request from {self.branch}"

    def to_dict(self) -> dict:
        return {"outcome": self.kind, "branch": self.branch}


@dataclass(frozen=True)
class SkippedNoUpdate:
    """Current version already equals the latest upstream version."""
    version: VersionTag
    kind = "skipped_no_update"

    def describe(self) -> str:
        return f"Already using latest version: {self.version}"

    def to_dict(self) -> dict:
        return {"outcome": self.kind, "version": self.version}


@dataclass(frozen=True)
class SkippedDuplicate:
    """A bump branch for the target version already exists remotely."""
    branch: str
    kind = "skipped_duplicate"

    def describe(self) -> str:
        return f"Remote branch {self.branch} exists, skipped"

    def to_dict(self) -> dict:
        return {"outcome": self.kind, "branch": self.branch}


PublicationOutcome = Union[DirectRelease, PullRequestOpened, SkippedNoUpdate, SkippedDuplicate]
