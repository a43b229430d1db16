"""
Duplicate-work guard: skip a bump whose branch already exists remotely.

This is what makes re-running the pipeline safe.  It is a best-effort check,
not a lock; two runs started at the same moment can both pass it.
"""

import logging

from .vcs import REMOTE, GitClient

logger = logging.getLogger(__name__)


class DuplicateWorkGuard:
    def __init__(self, git: GitClient):
        self._git = git

    def has_in_flight_work(self, branch: str) -> bool:
        """True if ``remotes/origin/<branch>`` exists after a prune-fetch.

        Raises VcsError if the refresh or the listing fails; the run must not
        continue on stale refs.
        """
        logger.info("Checking for an active pull request...")
        self._git.fetch_prune()
        wanted = f"remotes/{REMOTE}/{branch}"
        if wanted in self._git.list_branches():
            logger.info("Remote branch %s exists. Skip bumping", branch)
            return True
        logger.info("No pull request found for %s. Continue.", branch)
        return False
