"""
Test gate: reduce the project's test run to a Verdict.

A failing suite is an expected outcome (the new upstream version breaks
something), so it becomes a Verdict rather than an exception.
"""

import logging
from typing import Sequence

from .protocol import CommandRunner
from .types import Verdict

logger = logging.getLogger(__name__)


class GateRunner:
    def __init__(self, runner: CommandRunner, test_command: Sequence[str]):
        self._runner = runner
        self.test_command = list(test_command)

    def run_tests(self) -> Verdict:
        logger.info("Running tests to check compatibility with new version")
        if not self.test_command:
            logger.warning("No test command configured; treating the new version as incompatible")
            return Verdict.INCOMPATIBLE
        try:
            result = self._runner.run(self.test_command)
        except OSError as e:
            logger.warning("Could not run %s: %s", " ".join(self.test_command), e)
            return Verdict.INCOMPATIBLE
        if result.ok:
            logger.info("Tests passed.")
        else:
            logger.info("Tests failed (exit %d).", result.returncode)
        return Verdict.from_success(result.ok)
