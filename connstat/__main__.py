"""Allow running as python -m connstat."""

import sys

from connstat.cli import main

sys.exit(main())
