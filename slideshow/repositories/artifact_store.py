"""Artifact store - filesystem implementation for image and video bytes."""

import os
import shutil
from pathlib import Path
from typing import List, Union

StorePath = Union[str, Path]


class ArtifactStore:
    """
    Durable storage for uploaded images and generated videos.

    Paths handed to and returned by the store are relative to ``root``.
    Absolute paths are accepted as long as they resolve inside the root.
    """

    def __init__(self, root: Path):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def resolve(self, path: StorePath) -> Path:
        """Map a store path to an absolute filesystem path.

        Raises:
            ValueError: If the path escapes the store root
        """
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        resolved = candidate.resolve()
        if resolved != self.root and self.root not in resolved.parents:
            raise ValueError(f"Path outside artifact store: {path}")
        return resolved

    def relative(self, path: StorePath) -> str:
        """Return the store-relative form of ``path`` (POSIX separators)."""
        return self.resolve(path).relative_to(self.root).as_posix()

    def exists(self, path: StorePath) -> bool:
        try:
            return self.resolve(path).is_file()
        except ValueError:
            return False

    def read(self, path: StorePath) -> bytes:
        with open(self.resolve(path), "rb") as f:
            return f.read()

    def write(self, path: StorePath, content: bytes) -> str:
        """Write bytes atomically and return the store-relative path."""
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        temp_path = target.with_name(target.name + ".tmp")
        with open(temp_path, "wb") as f:
            f.write(content)
        os.replace(temp_path, target)
        return self.relative(target)

    def copy(self, src: StorePath, dst: StorePath) -> Path:
        """Copy a stored file to ``dst``; returns the absolute destination."""
        target = self.resolve(dst)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.resolve(src), target)
        return target

    def makedirs(self, path: StorePath) -> Path:
        directory = self.resolve(path)
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def listdir(self, path: StorePath) -> List[str]:
        """List entry names in a store directory (empty if missing)."""
        directory = self.resolve(path)
        if not directory.is_dir():
            return []
        return sorted(entry.name for entry in directory.iterdir())

    def remove(self, path: StorePath, recursive: bool = False) -> bool:
        """Remove a file, or a directory tree when ``recursive`` is set.

        Returns True if something was removed, False if nothing existed.
        Errors other than absence propagate.
        """
        target = self.resolve(path)
        if target == self.root:
            raise ValueError("Refusing to remove the artifact store root")
        if target.is_dir():
            if recursive:
                shutil.rmtree(target)
            else:
                target.rmdir()
            return True
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        return True
