"""Root conftest.py to configure pytest."""

import sys
from pathlib import Path

# Make 'taskboard' importable from a plain checkout
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
