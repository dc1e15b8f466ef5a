import sys
from ftsintensity.cli import main

sys.exit(main())
