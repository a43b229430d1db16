"""
Resolve the current (recorded) and latest (upstream) versions.
"""

import logging

from .errors import FormatError
from .protocol import ReleaseHost
from .types import VersionTag
from .workspace import Workspace

logger = logging.getLogger(__name__)


class VersionSource:
    """Reads the marker file and the upstream release feed.

    Args:
        workspace: working tree holding the marker file
        releases: release-hosting API client
        marker_file: path of the marker, relative to the workspace
        upstream: ``(owner, repo)`` whose releases are tracked
    """

    def __init__(
        self,
        workspace: Workspace,
        releases: ReleaseHost,
        *,
        marker_file: str,
        upstream: tuple[str, str],
    ):
        self._workspace = workspace
        self._releases = releases
        self._marker_file = marker_file
        self._upstream = upstream

    def current_version(self) -> VersionTag:
        """Version recorded in the marker file, whitespace stripped.

        Raises:
            OSError: marker file unreadable
            FormatError: marker file empty
        """
        version = self._workspace.read_text(self._marker_file).strip()
        if not version:
            raise FormatError(f"{self._marker_file} is empty")
        return version

    def latest_version(self) -> VersionTag:
        """Display name of the newest upstream release.

        Raises:
            UpstreamError: feed unreachable or non-200
            FormatError: feed empty or newest entry unnamed
        """
        owner, repo = self._upstream
        releases = self._releases.list_releases(owner, repo)
        if not releases:
            raise FormatError(f"No releases published by {owner}/{repo}")
        latest = releases[0]
        version = (latest.get("name") or latest.get("tag_name") or "").strip()
        if not version:
            raise FormatError(f"Newest release of {owner}/{repo} has no name")
        return version
