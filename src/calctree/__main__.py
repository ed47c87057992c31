import sys

from calctree.cli import main

sys.exit(main())
