#!/usr/bin/env python3
"""
Shelver - archive finished checklist items in markdown documents.

Convenience entry point for running from a checkout: ``python main.py archive todo.md``.
"""

import sys

from shelver.cli import main


if __name__ == "__main__":
    sys.exit(main())
