"""Vault connector for reading and writing Obsidian vault files."""

import fnmatch
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class VaultConnector:
    """Connects to an Obsidian vault; the document store behind the task index."""

    DEFAULT_EXCLUDES = [
        ".obsidian/*",
        ".trash/*",
        "node_modules/*",
        ".git/*",
    ]

    def __init__(
        self,
        vault_path: Path,
        include_patterns: list[str] | None = None,
        exclude_patterns: list[str] | None = None,
    ) -> None:
        """Initialize the vault connector.

        Args:
            vault_path: Path to the Obsidian vault root.
            include_patterns: Glob patterns for files to include. Defaults to ["**/*.md"].
            exclude_patterns: Glob patterns for files to exclude.
        """
        self.vault_path = vault_path
        self.include_patterns = include_patterns or ["**/*.md"]
        self.exclude_patterns = exclude_patterns or self.DEFAULT_EXCLUDES

    def _should_exclude(self, relative_path: str) -> bool:
        """Check if a file should be excluded based on patterns."""
        return any(fnmatch.fnmatch(relative_path, pattern) for pattern in self.exclude_patterns)

    def list_documents(self) -> list[str]:
        """List all note files in the vault.

        Returns:
            Sorted POSIX paths relative to the vault root.
        """
        notes: set[str] = set()
        for pattern in self.include_patterns:
            for file_path in self.vault_path.glob(pattern):
                if file_path.is_file():
                    relative = file_path.relative_to(self.vault_path).as_posix()
                    if not self._should_exclude(relative):
                        notes.add(relative)
        return sorted(notes)

    def list_folders(self) -> list[str]:
        """List every folder in the vault (relative POSIX paths, root excluded)."""
        folders: list[str] = []
        for dir_path in self.vault_path.rglob("*"):
            if dir_path.is_dir():
                relative = dir_path.relative_to(self.vault_path).as_posix()
                if not self._should_exclude(relative + "/"):
                    folders.append(relative)
        return sorted(folders)

    def read_text(self, relative_path: str) -> str:
        """Read a document's full text, line endings untouched."""
        with open(self.vault_path / relative_path, encoding="utf-8", newline="") as f:
            return f.read()

    def write_text(self, relative_path: str, content: str) -> None:
        """Replace a document's full text."""
        with open(self.vault_path / relative_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        logger.debug("Wrote %s (%d chars)", relative_path, len(content))
