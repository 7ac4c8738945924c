"""Unified diff inspection for staged backport patches."""

from dataclasses import dataclass
from typing import List, Optional
import re

QUOTED_PATH = r'"(?:[^"\\]|\\.)*"'
FILE_HEADER = re.compile(
    rf'^diff --git (?P<old>{QUOTED_PATH}|a/.*?) (?P<new>{QUOTED_PATH}|b/.*)$'
)
HUNK_HEADER = re.compile(r'^@@ -\d+(?:,\d+)? \+\d+(?:,\d+)? @@')
PATH_ESCAPE = re.compile(rb'\\([0-7]{3}|.)')
PATH_ESCAPES = {
    b'a': b'\a', b'b': b'\b', b't': b'\t', b'n': b'\n',
    b'v': b'\v', b'f': b'\f', b'r': b'\r', b'"': b'"', b'\\': b'\\',
}


def unquote_path(path: str) -> str:
    """
    Undo git's C-style quoting of a path.

    Paths with non-ASCII or special characters are written as
    ``"a/na\\303\\257ve.txt"``; octal escapes are UTF-8 bytes.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path

    def replace(match):
        escape = match.group(1)
        if len(escape) == 3:
            return bytes([int(escape, 8) & 0xFF])
        return PATH_ESCAPES.get(escape, escape)

    raw = PATH_ESCAPE.sub(replace, path[1:-1].encode('utf-8'))
    return raw.decode('utf-8', errors='replace')


def _strip_prefix(path: str, prefix: str) -> str:
    path = unquote_path(path)
    return path[len(prefix):] if path.startswith(prefix) else path


@dataclass
class FileDiff:
    """Summary of the changes a diff makes to one file."""
    old_path: str
    new_path: str
    hunks: int = 0
    additions: int = 0
    deletions: int = 0
    is_new_file: bool = False
    is_deleted: bool = False
    is_binary: bool = False

    @property
    def path(self) -> str:
        return self.old_path if self.is_deleted else self.new_path


def parse_pr_diff(diff_text: str) -> List[FileDiff]:
    """
    Split a ``git diff`` style patch into per-file summaries.

    Args:
        diff_text: Unified diff as served by GitHub, decoded for display

    Returns:
        One FileDiff per ``diff --git`` section, in patch order
    """
    if not diff_text or not diff_text.strip():
        return []

    file_diffs: List[FileDiff] = []
    current: Optional[FileDiff] = None
    in_hunk = False

    for line in diff_text.split('\n'):
        header = FILE_HEADER.match(line)
        if header:
            current = FileDiff(
                old_path=_strip_prefix(header.group('old'), 'a/'),
                new_path=_strip_prefix(header.group('new'), 'b/'),
            )
            file_diffs.append(current)
            in_hunk = False
            continue

        if current is None:
            continue

        if HUNK_HEADER.match(line):
            current.hunks += 1
            in_hunk = True
        elif not in_hunk:
            if line.startswith('new file mode'):
                current.is_new_file = True
            elif line.startswith('deleted file mode'):
                current.is_deleted = True
            elif line.startswith('Binary files') or line == 'GIT binary patch':
                current.is_binary = True
        elif line.startswith('+'):
            current.additions += 1
        elif line.startswith('-'):
            current.deletions += 1

    return file_diffs


def summarize(file_diffs: List[FileDiff]) -> str:
    """One-line description such as ``3 files changed, +10 -2``."""
    additions = sum(f.additions for f in file_diffs)
    deletions = sum(f.deletions for f in file_diffs)
    noun = "file" if len(file_diffs) == 1 else "files"
    return f"{len(file_diffs)} {noun} changed, +{additions} -{deletions}"
