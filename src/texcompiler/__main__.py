"""Module entrypoint for `python -m texcompiler`."""

from __future__ import annotations

from texcompiler.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
