#!/usr/bin/env python3
"""Sprout — entry point.

Run with:
    python main.py
    python -m sprout
"""

from sprout.__main__ import main


if __name__ == "__main__":
    main()
