"""Module entry point: python -m geo_logger ..."""

from __future__ import annotations

from geo_logger.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
