#!/usr/bin/env python3
"""
Codeshell - a small code editor over a persistent virtual workspace

This is a convenience wrapper for running from the repo root.
The actual entry point is codeshell.main:main (for pip install).
"""

from codeshell.main import main

if __name__ == "__main__":
    main()
