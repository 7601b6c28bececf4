# localizable_core.py
from __future__ import annotations

"""
Core helpers for .strings localization tables, used by the sync entry point,
the scripts/ helpers and the tests.

- Parsing: parse_entries(), parse_localizable_file(), extract_keys()
- Grouping: parse_key_and_language(), group_files_by_logical_group_and_language()
- Consistency: check_keys_consistency() -> KeyCheckResult
- Writing: add_missing_keys_to_localizable_file(), reformat_localizable_file()
- Swift output: Entry.to_swift_property(), render_swift_properties(), generate_swift_file()

Nothing here prints; callers pass a ``log`` callable when they want progress.
"""

from dataclasses import dataclass, field
from pathlib import Path
from collections.abc import Callable, Iterable

import os
import re

LANG_DIR_EXT = "lproj"
RESOURCE_EXT = "strings"

PLACEHOLDER_TEMPLATE = '"{}" = "";'

_SWIFT_HEADER = "\nimport Foundation\n\npublic enum Title {\n"
_SWIFT_FOOTER = "}\n"
_SWIFT_FILE_NAME = "Title.swift"

_PATH_RE = re.compile(
    r"^(.*)/([^/]+)\." + re.escape(LANG_DIR_EXT) + r"/([^/]+)\." + re.escape(RESOURCE_EXT) + r"$"
)


def _entry_pattern(allow_empty_value: bool) -> re.Pattern[str]:
    value = r"[^\"]*" if allow_empty_value else r"[^\"]+"
    return re.compile(r'^\s*"([^"]+)"\s*=\s*"(' + value + r')"\s*;')


# Strict: declaration output needs a value. Permissive: placeholders are keys too.
ENTRY_RE = _entry_pattern(allow_empty_value=False)
KEY_RE = _entry_pattern(allow_empty_value=True)


class LocalizableError(RuntimeError):
    """I/O failure on a localization file; always names the path and the cause."""

    def __init__(
        self, path: str | Path, cause: BaseException | str, action: str = "reading"
    ) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Error {action} {str(self.path)!r}: {cause}")


class WalkAborted(LocalizableError):
    """A directory below the scan root could not be listed."""

    def __init__(self, path: str | Path, cause: BaseException | str) -> None:
        super().__init__(path, cause, action="listing")


# -----------------------
# Parsing
# -----------------------


@dataclass
class Entry:
    key: str
    value: str

    def to_swift_property(self) -> str:
        return (
            f"public static let {self.key}: NSLocalizedString = "
            f'.init("{self.key}", comment: .empty)'
        )


def parse_entries(text: str, allow_empty_value: bool = False) -> list[Entry]:
    """
    Parse ``"key" = "value";`` lines. Lines that do not match are skipped.
    Duplicate keys produce duplicate entries.
    """
    pattern = KEY_RE if allow_empty_value else ENTRY_RE
    entries: list[Entry] = []
    for line in split_lines(text):
        m = pattern.match(line)
        if m:
            entries.append(Entry(m.group(1), m.group(2)))
    return entries


def split_lines(text: str) -> list[str]:
    """Split on LF only and drop one trailing CR per line; U+2028, FF, VT stay inside values."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _read_text(path: Path) -> str:
    try:
        # newline="" keeps "\r" and lone "\r" untranslated; split_lines() decides.
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise LocalizableError(path, e) from e


def parse_localizable_file(path: str | Path) -> list[Entry]:
    """Entries with a non-empty value, in file order."""
    return parse_entries(_read_text(Path(path)))


def extract_keys(path: str | Path) -> set[str]:
    """Key set of one file. Placeholder lines (empty value) count as keys."""
    return {e.key for e in parse_entries(_read_text(Path(path)), allow_empty_value=True)}


# -----------------------
# Grouping
# -----------------------


def parse_key_and_language(path: str | Path) -> tuple[str, str] | None:
    """
    Split ``<prefix>/<lang>.lproj/<name>.strings`` into ``(prefix + "/" + name, lang)``.

    The prefix is greedy, so only the language directory right above the file
    counts; earlier ``*.lproj`` segments stay in the prefix. Anything else gives None.
    """
    path_str = path.as_posix() if isinstance(path, Path) else str(path)
    m = _PATH_RE.match(path_str)
    if not m:
        return None
    base_path, language, file_name = m.groups()
    return f"{base_path}/{file_name}", language


def group_files_by_logical_group_and_language(
    files: Iterable[Path], log: Callable[[str], None] | None = None
) -> dict[str, dict[str, Path]]:
    """
    Map logical group -> language -> file. Unclassified paths are dropped.
    A repeated (group, language) pair keeps the later path and logs a warning.
    """
    grouped: dict[str, dict[str, Path]] = {}
    for p in files:
        p = Path(p)
        parsed = parse_key_and_language(p)
        if parsed is None:
            continue
        group, language = parsed
        languages = grouped.setdefault(group, {})
        previous = languages.get(language)
        if previous is not None and log:
            log(f"WARNING: duplicate {language!r} file for {group}: {previous} replaced by {p}")
        languages[language] = p
    return grouped


# -----------------------
# Consistency
# -----------------------


@dataclass
class KeyCheckResult:
    """
    Outcome of check_keys_consistency().

    status is one of CONSISTENT, INCONSISTENT, FAILED. ``missing`` is filled
    (for every file, empty lists included) only when INCONSISTENT; ``error``
    only when FAILED.
    """

    CONSISTENT = "consistent"
    INCONSISTENT = "inconsistent"
    FAILED = "failed"

    status: str
    missing: dict[Path, list[str]] = field(default_factory=dict)
    all_keys: set[str] = field(default_factory=set)
    error: str | None = None
    failed_path: Path | None = None

    @property
    def consistent(self) -> bool:
        return self.status == self.CONSISTENT


def check_keys_consistency(paths: Iterable[str | Path]) -> KeyCheckResult:
    """Compare the key sets of one group's language files against their union."""
    key_sets: dict[Path, set[str]] = {}
    for p in paths:
        p = Path(p)
        try:
            key_sets[p] = extract_keys(p)
        except LocalizableError as e:
            return KeyCheckResult(KeyCheckResult.FAILED, error=str(e), failed_path=p)

    all_keys: set[str] = set().union(*key_sets.values())
    missing = {p: sorted(all_keys - keys) for p, keys in key_sets.items()}

    if any(missing.values()):
        return KeyCheckResult(KeyCheckResult.INCONSISTENT, missing=missing, all_keys=all_keys)
    return KeyCheckResult(KeyCheckResult.CONSISTENT, all_keys=all_keys)


# -----------------------
# Writing
# -----------------------


def add_missing_keys_to_localizable_file(path: str | Path, missing_keys: Iterable[str]) -> None:
    """
    Append one ``"KEY" = "";`` line per key, in the given order.
    Existing content is left untouched; a file whose last line has no newline
    gets one first so the placeholder starts its own line. Not idempotent:
    callers recompute missing keys before every call.
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            f.seek(0, os.SEEK_END)
            needs_newline = f.tell() > 0
            if needs_newline:
                f.seek(-1, os.SEEK_END)
                needs_newline = f.read(1) != b"\n"
        with open(path, "a", encoding="utf-8", newline="\n") as f:
            if needs_newline:
                f.write("\n")
            for key in missing_keys:
                f.write(PLACEHOLDER_TEMPLATE.format(key) + "\n")
    except OSError as e:
        raise LocalizableError(path, e, action="writing") from e


def reformat_localizable_file(path: str | Path) -> None:
    """
    Rewrite a file as: header lines, blank, placeholders, blank, values sorted by key.

    Header lines are the non key/value lines before the first key/value line;
    non key/value lines after it are dropped.
    """
    path = Path(path)
    head: list[str] = []
    placeholders: list[str] = []
    body: list[tuple[str, str]] = []
    in_body = False

    for line in split_lines(_read_text(path)):
        m = KEY_RE.match(line)
        if m:
            in_body = True
            if m.group(2):
                body.append((m.group(1), line))
            else:
                placeholders.append(line)
        elif not in_body:
            head.append(line)

    body.sort(key=lambda item: item[0])

    out = [*head, "", *placeholders, "", *(line for _, line in body)]
    try:
        path.write_text("".join(line + "\n" for line in out), encoding="utf-8", newline="\n")
    except OSError as e:
        raise LocalizableError(path, e, action="writing") from e


# -----------------------
# Swift output
# -----------------------


def render_swift_properties(entries: Iterable[Entry]) -> str:
    return "\n".join(e.to_swift_property() for e in entries)


def generate_swift_file(path: str | Path, log: Callable[[str], None] | None = None) -> Path:
    """Write Title.swift next to ``path`` with one property per non-empty entry."""
    path = Path(path)
    entries = parse_localizable_file(path)

    parts = [_SWIFT_HEADER]
    for e in entries:
        parts.append(f"    {e.to_swift_property()}\n")
    parts.append(_SWIFT_FOOTER)

    out = path.with_name(_SWIFT_FILE_NAME)
    try:
        out.write_text("".join(parts), encoding="utf-8", newline="\n")
    except OSError as e:
        raise LocalizableError(out, e, action="writing") from e
    if log:
        log(f"Wrote {out} ({len(entries)} properties)")
    return out
