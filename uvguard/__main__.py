import sys

from uvguard.cli import main

sys.exit(main())
