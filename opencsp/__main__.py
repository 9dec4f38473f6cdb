import sys

from opencsp.cli import main

sys.exit(main())
