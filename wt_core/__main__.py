import sys

from wt_core.cli.main import main

sys.exit(main())
