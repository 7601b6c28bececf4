#!/usr/bin/env python3
"""
Localizable Sync
Scans a tree for <lang>.lproj/*.strings tables, finds keys that exist in one
language but not another, and appends empty placeholders for them.

Run with no arguments: the scan root is the folder this program lives in.
Progress goes to stdout; per-group and per-file failures are reported and the
run goes on. Only an unreadable directory aborts the run (exit code 1).
"""

from __future__ import annotations

import sys
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO

from localizable_core import (
    RESOURCE_EXT,
    KeyCheckResult,
    LocalizableError,
    WalkAborted,
    add_missing_keys_to_localizable_file,
    check_keys_consistency,
    group_files_by_logical_group_and_language,
)

APP_NAME = "Localizable Sync"
VERSION = "0.2.0"

DEFAULT_EXTENSIONS: tuple[str, ...] = (RESOURCE_EXT,)
DEFAULT_EXCLUDE_DIRS: tuple[str, ...] = ("SBPWidget.framework",)


# ---------- logging ----------


def make_logger(log_fp: IO[str] | None = None) -> Callable[[str], None]:
    """Timestamped stdout logger; mirrors every line into ``log_fp`` when given."""

    def log(msg: str) -> None:
        line = time.strftime("[%H:%M:%S] ") + msg
        print(line)
        try:
            if log_fp:
                log_fp.write(line + "\n")
                log_fp.flush()
        except Exception:
            pass

    return log


# ---------- options / report ----------


@dataclass
class SyncOptions:
    root: Path
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    exclude_dirs: tuple[str, ...] = DEFAULT_EXCLUDE_DIRS
    # Walk order is filesystem dependent; sorting makes runs reproducible.
    sort_paths: bool = True


@dataclass
class SyncReport:
    files: list[Path] = field(default_factory=list)
    groups: dict[str, dict[str, Path]] = field(default_factory=dict)
    checked: list[str] = field(default_factory=list)
    consistent: list[str] = field(default_factory=list)
    updated: dict[Path, list[str]] = field(default_factory=dict)
    failures: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


# ---------- walking ----------


def find_files(
    root: str | Path, extensions: Iterable[str], exclude: Iterable[str]
) -> list[Path]:
    """
    Recursively collect files whose extension is in ``extensions``.
    Subdirectories whose *name* is in ``exclude`` are not entered.
    Raises WalkAborted if any directory cannot be listed.
    """
    root = Path(root)
    exts = {e.lstrip(".") for e in extensions}
    excluded = set(exclude)
    files: list[Path] = []

    try:
        children = list(root.iterdir())
    except OSError as e:
        raise WalkAborted(root, e) from e

    for p in children:
        if p.is_dir():
            if p.name not in excluded:
                files.extend(find_files(p, exts, excluded))
        elif p.suffix and p.suffix[1:] in exts:
            files.append(p)
    return files


# ---------- pipeline ----------


def _multi_language_groups(grouped: dict[str, dict[str, Path]]) -> dict[str, list[Path]]:
    # Nothing to compare against in a single-language group.
    return {
        group: [languages[lang] for lang in sorted(languages)]
        for group, languages in sorted(grouped.items())
        if len(languages) > 1
    }


def _inject(result: KeyCheckResult, report: SyncReport, log: Callable[[str], None]) -> None:
    for path, missing in result.missing.items():
        if not missing:
            continue
        try:
            add_missing_keys_to_localizable_file(path, missing)
        except LocalizableError as e:
            log(f"ERROR: {e}")
            report.failures.append(str(e))
            continue
        report.updated[path] = list(missing)
        log(f"Added {len(missing)} key(s) to {path}: {', '.join(missing)}")


def run_sync(options: SyncOptions, log: Callable[[str], None] | None = None) -> SyncReport:
    """
    Walk, group, check and inject. WalkAborted propagates; group read errors
    and write errors are logged, collected in the report and skipped.
    """
    log = log or (lambda _msg: None)
    report = SyncReport()

    log(f"Scan root: {options.root}")
    files = find_files(options.root, options.extensions, options.exclude_dirs)
    if options.sort_paths:
        files.sort()
    report.files = files
    log(f"Found {len(files)} resource file(s).")

    report.groups = group_files_by_logical_group_and_language(files, log=log)
    to_check = _multi_language_groups(report.groups)
    log(f"{len(report.groups)} logical group(s), {len(to_check)} with more than one language.")

    for group, paths in to_check.items():
        report.checked.append(group)
        result = check_keys_consistency(paths)
        if result.status == KeyCheckResult.FAILED:
            log(f"ERROR: {group}: {result.error}")
            report.failures.append(result.error or group)
        elif result.status == KeyCheckResult.CONSISTENT:
            report.consistent.append(group)
            log(f"Up to date: {group}")
        else:
            log(f"Missing keys in {group}:")
            for path, missing in result.missing.items():
                log(f"  {path}: {', '.join(missing) if missing else '-'}")
            _inject(result, report, log)

    log(
        f"Done: {len(report.checked)} checked, {len(report.consistent)} up to date, "
        f"{len(report.updated)} file(s) updated, {len(report.failures)} failure(s)."
    )
    return report


def _program_dir() -> Path:
    try:
        return Path(__file__).resolve().parent
    except Exception:
        return Path.cwd()


def main() -> int:
    options = SyncOptions(root=_program_dir())
    log = make_logger()
    log(f"{APP_NAME} v{VERSION}")
    try:
        run_sync(options, log)
    except WalkAborted as e:
        log(f"ERROR: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
