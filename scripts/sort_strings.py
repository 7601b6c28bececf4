#!/usr/bin/env python
"""
Rewrite .strings files in place: header, placeholders, then entries sorted by key.
Comments and blank lines after the first entry are dropped, so review the diff.

Usage: python scripts/sort_strings.py FILE [FILE ...]
"""

from __future__ import annotations
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from localizable_core import LocalizableError, reformat_localizable_file  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(__doc__.strip().splitlines()[-1], file=sys.stderr)
        return 2

    rc = 0
    for name in argv:
        try:
            reformat_localizable_file(Path(name))
            print(f"Sorted: {name}")
        except LocalizableError as e:
            print(f"[FAIL] {e}", file=sys.stderr)
            rc = 1
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
