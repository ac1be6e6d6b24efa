"""Allow ``python -m orgtree``."""

import sys

from orgtree.cli import main

sys.exit(main())
