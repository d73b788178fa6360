"""Pytest configuration for keytrust tests."""
import sys
from pathlib import Path

# conftest is in tests/, so parent.parent is project root
project_root = Path(__file__).resolve().parent.parent
src_path = project_root / "src"

sys.path.insert(0, str(src_path))
