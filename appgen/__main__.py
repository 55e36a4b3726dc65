"""Allow ``python -m appgen``."""

import sys

from appgen.pipeline import main

sys.exit(main())
