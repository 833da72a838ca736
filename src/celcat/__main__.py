import sys

from celcat.cli import main

sys.exit(main())
