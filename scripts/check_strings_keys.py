#!/usr/bin/env python
"""
Fail if the <lang>.lproj/*.strings tables of a logical group don't share the same keys.
- Placeholder entries ("key" = "";) count as present
- Report missing keys per file
- Never writes; use localizable_sync.py to append placeholders
"""

from __future__ import annotations
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from localizable_core import KeyCheckResult, WalkAborted, check_keys_consistency  # noqa: E402
from localizable_core import group_files_by_logical_group_and_language  # noqa: E402
from localizable_sync import DEFAULT_EXCLUDE_DIRS, DEFAULT_EXTENSIONS, find_files  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    root = Path(argv[0]) if argv else ROOT

    try:
        files = sorted(find_files(root, DEFAULT_EXTENSIONS, DEFAULT_EXCLUDE_DIRS))
    except WalkAborted as e:
        print(f"[FAIL] {e}", file=sys.stderr)
        return 1
    if not files:
        print(f"No .strings files found under {root}.", file=sys.stderr)
        return 1

    grouped = group_files_by_logical_group_and_language(files)

    ok = True
    for group, languages in sorted(grouped.items()):
        if len(languages) < 2:
            continue
        result = check_keys_consistency(languages[lang] for lang in sorted(languages))
        if result.status == KeyCheckResult.FAILED:
            ok = False
            print(f"\n[FAIL] {group}: {result.error}")
            continue
        for path, missing in result.missing.items():
            if missing:
                ok = False
                print(f"\n❌ Missing in {path}:")
                for m in missing:
                    print(f"  - {m}")

    if ok:
        print("[OK] .strings key sets match across languages.")
        return 0
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
