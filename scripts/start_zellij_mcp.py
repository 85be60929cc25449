#!/usr/bin/env python3
"""Run the zellij-mcp CLI from a source checkout without installing it."""

import sys
from pathlib import Path

# Add src directory to Python path
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

from zellij_mcp.cli import main

if __name__ == "__main__":
    sys.exit(main())
