"""Entry point for ``python -m ambler``."""

import sys

from ambler.main import main

if __name__ == "__main__":
    sys.exit(main())
