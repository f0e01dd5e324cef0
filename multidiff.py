#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
MultiDiff: diff over multiple files.

Drop files or directories onto the window. Every file is hashed (SHA-1) and gets a colored square;
files with identical content share the same color. "Show duplicates" steps through groups of equal files,
and any two selected files can be opened in an external side-by-side diff tool.
"""

from gui import main
import os

if __name__ == "__main__":
    if os.name == "nt":
        try:
            import ctypes  # DPI awareness for sharper UI on Windows
            ctypes.windll.shcore.SetProcessDpiAwareness(1)
        except (AttributeError, OSError):
            pass
    main()
