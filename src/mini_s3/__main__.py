"""Allow ``python -m mini_s3``."""

import sys

from mini_s3.adapters.inbound.cli import main

if __name__ == "__main__":
    sys.exit(main())
