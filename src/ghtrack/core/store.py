"""VaultStore: file operations on the markdown vault the mirror lives in.

All paths are vault-relative POSIX strings (``GitHub Issues/octo/widgets``).
Deleting a file moves it into ``.trash/`` at the vault root instead of
unlinking it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath

TRASH_DIR = ".trash"


class StoreError(Exception):
    pass


@dataclass(frozen=True)
class VaultEntry:
    """A file or folder inside the vault."""

    path: str
    is_folder: bool = False

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name


class VaultStore:
    """Reads and writes notes below a vault root directory."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()

    # -- Path helpers --

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise StoreError(f"Path escapes the vault: {path}")
        return target

    def _relative(self, target: Path) -> str:
        return target.relative_to(self.root).as_posix()

    @staticmethod
    def _hidden(relative: Path) -> bool:
        return any(part.startswith(".") for part in relative.parts)

    # -- Queries --

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def is_file(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def is_folder(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def read(self, path: str) -> str:
        target = self._resolve(path)
        if not target.is_file():
            raise StoreError(f"No such file: {path}")
        return target.read_text(encoding="utf-8")

    def list_files(self, prefix: str = "") -> list[VaultEntry]:
        """Markdown files whose vault path starts with ``prefix``, sorted by path.

        Hidden folders (``.trash``, ``.obsidian``, ...) are never listed.
        """
        base_dir = prefix.rsplit("/", 1)[0] if "/" in prefix else ""
        base = self._resolve(base_dir)
        if not base.is_dir():
            return []

        entries = []
        for candidate in base.rglob("*.md"):
            if not candidate.is_file():
                continue
            relative = candidate.relative_to(self.root)
            if self._hidden(relative):
                continue
            path = relative.as_posix()
            if path.startswith(prefix):
                entries.append(VaultEntry(path))
        return sorted(entries, key=lambda e: e.path)

    def list_folder_children(self, path: str) -> list[VaultEntry]:
        """Direct children of a folder (files and folders), sorted by name."""
        folder = self._resolve(path)
        if not folder.is_dir():
            raise StoreError(f"No such folder: {path}")
        return [
            VaultEntry(self._relative(child), is_folder=child.is_dir())
            for child in sorted(folder.iterdir(), key=lambda p: p.name)
        ]

    # -- Mutations --

    def create(self, path: str, text: str) -> None:
        target = self._resolve(path)
        if target.exists():
            raise StoreError(f"File already exists: {path}")
        if not target.parent.is_dir():
            raise StoreError(f"Parent folder does not exist: {path}")
        target.write_text(text, encoding="utf-8")

    def overwrite(self, path: str, text: str) -> None:
        target = self._resolve(path)
        if not target.is_file():
            raise StoreError(f"No such file: {path}")
        target.write_text(text, encoding="utf-8")

    def create_folder(self, path: str) -> None:
        target = self._resolve(path)
        if target.is_file():
            raise StoreError(f"A file is in the way: {path}")
        target.mkdir(parents=True, exist_ok=True)

    def delete(self, path: str) -> str:
        """Move a file into the vault trash. Returns its new vault path."""
        target = self._resolve(path)
        if not target.is_file():
            raise StoreError(f"No such file: {path}")

        trash = self.root / TRASH_DIR
        trash.mkdir(exist_ok=True)
        destination = trash / target.name
        counter = 1
        while destination.exists():
            destination = trash / f"{target.stem} {counter}{target.suffix}"
            counter += 1
        target.rename(destination)
        return self._relative(destination)

    def delete_folder(self, path: str) -> None:
        """Remove an empty folder."""
        target = self._resolve(path)
        if target == self.root:
            raise StoreError("Refusing to delete the vault root")
        if not target.is_dir():
            raise StoreError(f"No such folder: {path}")
        if any(target.iterdir()):
            raise StoreError(f"Folder is not empty: {path}")
        target.rmdir()
