"""
Filesystem access for the tracked working tree.
"""

import json
from pathlib import Path
from typing import Any

from .errors import FormatError


class Workspace:
    """Reads and writes files relative to the working-tree root.

    OSError from the filesystem propagates unchanged.
    """

    def __init__(self, root: Path | str = "."):
        self.root = Path(root)

    def path(self, relpath: str) -> Path:
        return self.root / relpath

    def exists(self, relpath: str) -> bool:
        return self.path(relpath).is_file()

    def read_text(self, relpath: str) -> str:
        return self.path(relpath).read_text(encoding="utf-8")

    def write_text(self, relpath: str, text: str) -> None:
        """Write ``text`` verbatim; no newline is appended."""
        self.path(relpath).write_text(text, encoding="utf-8")

    def read_json(self, relpath: str) -> Any:
        text = self.read_text(relpath)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise FormatError(f"{relpath} is not valid JSON: {e}") from e

    def write_json(self, relpath: str, data: Any) -> None:
        self.write_text(relpath, json.dumps(data, indent=2, ensure_ascii=False))
