import sys

from fastdev.cli import main

sys.exit(main())
