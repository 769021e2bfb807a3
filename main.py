"""Run the CLI from a source checkout: `python -m main demo`.

The packages live under `src/`; without an editable install they are not
importable, so `src/` is put on `sys.path` first.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def main() -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))

    if sys.platform == "win32":
        # cp1252 consoles choke on Rich box characters.
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
