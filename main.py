#!/usr/bin/env python3
# main.py
"""
Nova launcher for a source checkout: makes `src/` importable and starts the editor.
The installed package provides the same entry point as the `nova` command.
"""

import os
import sys

src_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from nova.main import start  # noqa: E402


if __name__ == "__main__":
    start()
