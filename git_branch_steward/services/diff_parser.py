"""Parsers for git diff output: unified diffs, name-status and numstat."""

import re
from typing import List, Optional

from git_branch_steward.models.comparison import DiffHunk, DiffLine, FileDiff, FileStatus, LineType
from git_branch_steward.models.git import NameStatusEntry

# @@ -oldStart[,oldLines] +newStart[,newLines] @@ [section]
HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")
BINARY_DIFF_RE = re.compile(r"^Binary files .* differ$", re.MULTILINE)

_STATUS_BY_CODE = {
    "A": FileStatus.ADDED,
    "C": FileStatus.ADDED,  # Copies introduce a new path
    "D": FileStatus.DELETED,
    "M": FileStatus.MODIFIED,
    "T": FileStatus.MODIFIED,  # Type change
    "U": FileStatus.MODIFIED,  # Unmerged
    "R": FileStatus.RENAMED,
}

# Rename and copy records carry old and new paths
_TWO_PATH_CODES = ("R", "C")


def split_lines(text: str) -> List[str]:
    """Split git output on newlines only.

    str.splitlines() also breaks on form feeds, U+2028 and other separators
    that are legal inside file content.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def parse_unified_diff(diff_text: str) -> List[DiffHunk]:
    """Parse unified diff text into hunks.

    Lines before the first hunk header (diff --git, index, ---/+++ headers) are
    ignored, as are "\\ No newline at end of file" markers.
    """
    hunks: List[DiffHunk] = []
    current: Optional[DiffHunk] = None
    old_line = new_line = 0

    for line in split_lines(diff_text):
        if line.startswith("@@"):
            match = HUNK_HEADER_RE.match(line)
            if not match:
                current = None
                continue
            old_start, old_lines, new_start, new_lines, header = match.groups()
            current = DiffHunk(
                old_start=int(old_start),
                old_lines=int(old_lines) if old_lines is not None else 1,
                new_start=int(new_start),
                new_lines=int(new_lines) if new_lines is not None else 1,
                header=header.strip(),
            )
            hunks.append(current)
            old_line = current.old_start
            new_line = current.new_start
            continue

        if current is None or not line:
            continue

        marker = line[0]
        if marker == "+":
            current.lines.append(
                DiffLine(type=LineType.ADDITION, content=line[1:], new_line_number=new_line)
            )
            new_line += 1
        elif marker == "-":
            current.lines.append(
                DiffLine(type=LineType.DELETION, content=line[1:], old_line_number=old_line)
            )
            old_line += 1
        elif marker == " ":
            current.lines.append(
                DiffLine(
                    type=LineType.CONTEXT,
                    content=line[1:],
                    old_line_number=old_line,
                    new_line_number=new_line,
                )
            )
            old_line += 1
            new_line += 1
        elif line.startswith("diff --git"):
            # Start of another file's diff
            current = None

    return hunks


def is_binary_diff(diff_text: str) -> bool:
    """Check whether unified diff output reports a binary file."""
    return bool(BINARY_DIFF_RE.search(diff_text)) or "GIT binary patch" in diff_text


def is_binary_numstat(numstat_text: str) -> bool:
    """Check numstat output for a binary file.

    Binary files are reported with "-" in both the additions and deletions
    columns instead of numbers.
    """
    for line in split_lines(numstat_text):
        columns = line.split("\t")
        if len(columns) < 2:
            continue
        added, deleted = columns[0].strip(), columns[1].strip()
        if not added.isdigit() and not deleted.isdigit():
            return True
    return False


def parse_name_status_line(line: str) -> Optional[NameStatusEntry]:
    """Parse one line of ``git diff --name-status`` output.

    Fields are tab separated; whitespace separation is accepted for paths
    without spaces. Rename and copy codes carry a similarity score and two
    paths (old, new).
    """
    line = line.strip()
    if not line:
        return None

    parts = line.split("\t") if "\t" in line else line.split()
    if len(parts) < 2:
        return None

    code = parts[0].strip()
    if not code:
        return None
    return _entry_from_fields(code, parts[1:])


def parse_name_status_z(output: str) -> List[NameStatusEntry]:
    """Parse ``git diff --name-status -z`` output.

    Fields are NUL terminated and paths are never quoted. Rename and copy
    records carry two path fields (old, new) after the status code.
    """
    fields = output.split("\0")
    entries = []
    index = 0
    while index < len(fields):
        code = fields[index].strip()
        index += 1
        if not code:
            continue

        width = 2 if code[0] in _TWO_PATH_CODES else 1
        entry = _entry_from_fields(code, fields[index:index + width])
        if entry is None:
            break
        entries.append(entry)
        index += width
    return entries


def _entry_from_fields(code: str, paths: List[str]) -> Optional[NameStatusEntry]:
    letter = code[0]
    if letter in _TWO_PATH_CODES:
        if len(paths) < 2 or not paths[1]:
            return None
        similarity = int(code[1:]) if code[1:].isdigit() else None
        return NameStatusEntry(status_code=letter, path=paths[1], old_path=paths[0], similarity=similarity)

    if not paths or not paths[0]:
        return None
    return NameStatusEntry(status_code=letter, path=paths[0])


def file_diff_from_entry(entry: NameStatusEntry) -> FileDiff:
    """Create an (unpopulated) FileDiff from a name-status entry."""
    status = _STATUS_BY_CODE.get(entry.status_code, FileStatus.MODIFIED)
    if status == FileStatus.RENAMED:
        similarity = entry.similarity
        if similarity is not None:
            similarity = max(0, min(100, similarity))
        return FileDiff(
            path=entry.path,
            status=status,
            old_path=entry.old_path,
            similarity_index=similarity,
        )
    return FileDiff(path=entry.path, status=status)


def apply_hunks(file_diff: FileDiff, hunks: List[DiffHunk]) -> FileDiff:
    """Attach parsed hunks to a FileDiff and total its line counts."""
    file_diff.hunks = hunks
    file_diff.additions = sum(hunk.additions for hunk in hunks)
    file_diff.deletions = sum(hunk.deletions for hunk in hunks)
    return file_diff

