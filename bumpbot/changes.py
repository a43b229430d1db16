"""
Apply a new upstream version to the working tree.

Steps run in a fixed order and each one fails on its own: marker file,
dependency manifest, dependency sync, formatter.  A failing sync or format
tool aborts the run with ToolError, since the test gate is meaningless on a
tree with stale dependency locks.
"""

import logging
from typing import Sequence

from .errors import ToolError
from .protocol import CommandRunner
from .types import VersionTag
from .workspace import Workspace

logger = logging.getLogger(__name__)

VERSION_PLACEHOLDER = "{version}"


def run_tool(runner: CommandRunner, args: Sequence[str]) -> None:
    """Run an external tool; raise ToolError unless it exits 0."""
    argv = list(args)
    try:
        result = runner.run(argv)
    except OSError as e:
        raise ToolError(argv, None, str(e)) from e
    if not result.ok:
        raise ToolError(argv, result.returncode)


def expand_command(args: Sequence[str], version: VersionTag) -> list[str]:
    """Substitute ``{version}`` in each argument."""
    return [a.replace(VERSION_PLACEHOLDER, version) for a in args]


class ChangeApplier:
    """Writes the version into tracked files and normalizes the tree.

    Args:
        workspace: working tree to edit
        runner: runs the sync and format tools
        marker_file: plain-text file recording the applied version
        manifest_file: JSON manifest of pinned dependencies
        manifest_key: top-level manifest key to update
        manifest_version_prefix: prepended to the tag in the manifest ("@")
        sync_command: dependency-sync tool; empty to skip
        format_command: formatter; empty to skip
    """

    def __init__(
        self,
        workspace: Workspace,
        runner: CommandRunner,
        *,
        marker_file: str,
        manifest_file: str,
        manifest_key: str,
        manifest_version_prefix: str = "@",
        sync_command: Sequence[str] = (),
        format_command: Sequence[str] = (),
    ):
        self._workspace = workspace
        self._runner = runner
        self.marker_file = marker_file
        self.manifest_file = manifest_file
        self.manifest_key = manifest_key
        self.manifest_version_prefix = manifest_version_prefix
        self.sync_command = list(sync_command)
        self.format_command = list(format_command)

    def apply_version(self, tag: VersionTag) -> None:
        self.update_marker(tag)
        self.update_manifest(tag)
        self.sync_dependencies()
        self.format_tree()

    def update_marker(self, tag: VersionTag) -> None:
        logger.info("Updating %s to %s", self.marker_file, tag)
        self._workspace.write_text(self.marker_file, tag)
        logger.info("Updated %s", self.marker_file)

    def update_manifest(self, tag: VersionTag) -> bool:
        """Point the manifest entry at ``tag``.  Returns False if nothing changed."""
        if not self._workspace.exists(self.manifest_file):
            logger.debug("No %s; skipping manifest update", self.manifest_file)
            return False
        manifest = self._workspace.read_json(self.manifest_file)
        if not isinstance(manifest, dict) or not manifest.get(self.manifest_key):
            return False

        pinned = f"{self.manifest_version_prefix}{tag}"
        logger.info("Updating %s %s version to %s", self.manifest_file, self.manifest_key, tag)
        entry = manifest[self.manifest_key]
        if isinstance(entry, dict):
            entry["version"] = pinned
        else:
            manifest[self.manifest_key] = pinned
        self._workspace.write_json(self.manifest_file, manifest)
        logger.info("Updated %s", self.manifest_file)
        return True

    def sync_dependencies(self) -> None:
        if not self.sync_command:
            logger.debug("No sync command configured")
            return
        run_tool(self._runner, self.sync_command)

    def format_tree(self) -> None:
        if not self.format_command:
            logger.debug("No format command configured")
            return
        run_tool(self._runner, self.format_command)


def install_runtime(runner: CommandRunner, command: Sequence[str], version: VersionTag) -> None:
    """Install the upstream runtime at ``version`` so the test gate runs against it."""
    if not command:
        return
    logger.info("Installing %s...", version)
    run_tool(runner, expand_command(command, version))
    logger.info("Installed.")
