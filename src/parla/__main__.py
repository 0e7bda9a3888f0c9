"""Run the terminal chat: ``python -m parla``."""

from __future__ import annotations

import sys

from parla.cli import main

if __name__ == "__main__":
    sys.exit(main())
