"""Allow ``python -m rjsync``."""

import sys

from rjsync.cli import main

sys.exit(main())
