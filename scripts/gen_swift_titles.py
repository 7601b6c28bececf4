#!/usr/bin/env python
"""
Generate Title.swift (one NSLocalizedString property per key) next to a .strings file.

Usage: python scripts/gen_swift_titles.py path/to/en.lproj/Localizable.strings
"""

from __future__ import annotations
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from localizable_core import LocalizableError, generate_swift_file  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print(__doc__.strip().splitlines()[-1], file=sys.stderr)
        return 2
    try:
        generate_swift_file(Path(argv[0]), log=print)
    except LocalizableError as e:
        print(f"[FAIL] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
