import sys

from webcal_mirror.cli import main

sys.exit(main())
