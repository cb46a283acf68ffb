"""Entry point for ``python -m repoforge``."""

import sys

from repoforge.cli import main

if __name__ == "__main__":
    sys.exit(main())
