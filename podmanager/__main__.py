import sys

from podmanager.cli import main

sys.exit(main())
