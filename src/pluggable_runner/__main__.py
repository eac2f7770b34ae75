from __future__ import annotations

import sys

from pluggable_runner.app.cli import main

if __name__ == "__main__":
    sys.exit(main())
