#!/usr/bin/env python3
"""Run a Stone River Portal batch job.

Examples
--------
    python scripts/run_batch.py verify-suffixes --demo
    python scripts/run_batch.py suspend --model arrears --dry-run
    python scripts/run_batch.py validate-upload new-customers.csv
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from stone_river.cli import main

if __name__ == "__main__":
    sys.exit(main())
