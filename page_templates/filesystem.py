"""Virtual filesystems that templates are registered from.

A filesystem exposes slash-separated paths relative to its own root. Globbing
matches one path segment per pattern segment, so ``*`` never crosses ``/``:
``pages/*.html`` matches ``pages/index.html`` but not ``pages/admin/index.html``.
"""

from collections.abc import Mapping
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Protocol, runtime_checkable


@runtime_checkable
class TemplateFS(Protocol):
    """Protocol for filesystems that templates can be registered from."""

    def glob(self, pattern: str) -> list[str]:
        """Return the sorted paths of the files matching ``pattern``."""
        ...

    def read_text(self, path: str) -> str:
        """Return the contents of the file at ``path``.

        Raises:
            FileNotFoundError: If no such file exists
        """
        ...


INVALID_SEGMENTS = frozenset({"", ".", ".."})


def match_path(pattern: str, path: str) -> bool:
    """Report whether a slash-separated ``path`` matches ``pattern`` segment by segment."""
    pattern_parts = pattern.strip("/").split("/")
    path_parts = path.strip("/").split("/")
    if any(part in INVALID_SEGMENTS for part in path_parts):
        return False
    if len(pattern_parts) != len(path_parts):
        return False
    return all(fnmatchcase(part, pat) for pat, part in zip(pattern_parts, path_parts, strict=True))


class DirectoryFS:
    """Filesystem rooted at a directory on disk."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def __repr__(self) -> str:
        return f"DirectoryFS({str(self.root)!r})"

    def glob(self, pattern: str) -> list[str]:
        pattern = pattern.strip("/")
        if any(part in INVALID_SEGMENTS for part in pattern.split("/")):
            return []

        matches = []
        for candidate in self.root.glob(pattern):
            if not candidate.is_file():
                continue
            relative = candidate.relative_to(self.root).as_posix()
            if match_path(pattern, relative):
                matches.append(relative)
        return sorted(matches)

    def read_text(self, path: str) -> str:
        return self._resolve(path).read_text(encoding="utf-8")

    def _resolve(self, path: str) -> Path:
        full_path = (self.root / PurePosixPath(path.lstrip("/"))).resolve()
        if not full_path.is_relative_to(self.root):
            raise FileNotFoundError(f"path escapes filesystem root: {path}")
        return full_path


class MemoryFS:
    """Filesystem held in memory as a mapping of path to file contents.

    Example:
        fs = MemoryFS({"layout.html": "<body>{% block content %}{% endblock %}</body>"})
    """

    def __init__(self, files: Mapping[str, str]):
        self.files = {path.strip("/"): content for path, content in files.items()}

    def __repr__(self) -> str:
        return f"MemoryFS({sorted(self.files)!r})"

    def glob(self, pattern: str) -> list[str]:
        return sorted(path for path in self.files if match_path(pattern, path))

    def read_text(self, path: str) -> str:
        try:
            return self.files[path.strip("/")]
        except KeyError:
            raise FileNotFoundError(path) from None
