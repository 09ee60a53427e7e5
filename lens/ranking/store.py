"""Text document store used by the criteria repository."""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class TextStore(Protocol):
    """Minimal read/write access to text documents.

    ``read_text`` must raise ``FileNotFoundError`` when the document does
    not exist so callers can tell "absent" apart from "unreadable".
    """

    def read_text(self, path: Path) -> str:
        """Read a UTF-8 document."""
        ...

    def write_text(self, path: Path, content: str) -> None:
        """Write a UTF-8 document, creating parent directories."""
        ...


class LocalTextStore:
    """Filesystem-backed text store."""

    def read_text(self, path: Path) -> str:
        """Read a UTF-8 file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        return path.read_text(encoding="utf-8")

    def write_text(self, path: Path, content: str) -> None:
        """Write a UTF-8 file, creating parent directories as needed."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
