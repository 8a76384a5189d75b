"""Allow `python -m expose_cli`"""

import sys

from .main import main

sys.exit(main())
