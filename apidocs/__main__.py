import sys

from apidocs.cli import main

sys.exit(main())
