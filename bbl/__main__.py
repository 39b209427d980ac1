import sys

from bbl.cli import main

sys.exit(main())
