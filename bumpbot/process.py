"""
Subprocess-backed CommandRunner.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from .protocol import CommandResult

logger = logging.getLogger(__name__)


class SubprocessRunner:
    """Run programs in a working directory, blocking until they exit.

    Output goes straight to the terminal unless ``capture`` is set, in which
    case stdout is collected and returned as text.  No timeout is applied.
    """

    def __init__(self, cwd: Optional[Path] = None):
        self._cwd = Path(cwd) if cwd is not None else None

    def run(self, args: Sequence[str], *, capture: bool = False) -> CommandResult:
        argv = [str(a) for a in args]
        logger.debug("exec: %s", " ".join(argv))
        proc = subprocess.run(
            argv,
            cwd=self._cwd,
            stdout=subprocess.PIPE if capture else None,
            text=True,
            check=False,
        )
        return CommandResult(argv, proc.returncode, proc.stdout or "")
