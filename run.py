#!/usr/bin/env python3
"""
Launcher script for ralph.
Run this script to use the CLI from a source checkout.
"""

import sys
import os

# Add the current directory to Python path so we can import ralph
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from ralph.main import main

if __name__ == "__main__":
    sys.exit(main())
