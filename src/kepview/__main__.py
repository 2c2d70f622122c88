"""Module entrypoint for ``python -m kepview``."""

from __future__ import annotations

from kepview.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
