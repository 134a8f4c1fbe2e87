"""Command-line entrypoint for the manuscript review tool."""

from __future__ import annotations

from manuscript_review.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
