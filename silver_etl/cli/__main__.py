import sys

from .silver_cli import main

sys.exit(main())
