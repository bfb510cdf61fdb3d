import sys

from rocketcart.cli import main

sys.exit(main())
