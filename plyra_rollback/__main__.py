import sys

from plyra_rollback.cli import main

sys.exit(main())
