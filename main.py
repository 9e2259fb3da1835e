"""Convenience entry point to run the FileVault CLI.

Allows running `python main.py encrypt file.txt` from the project root without
installing the package.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the src/ directory is on sys.path so `import filevault` works
ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from filevault.frontend.cli.app import main


if __name__ == "__main__":
    raise SystemExit(main())
