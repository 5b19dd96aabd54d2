import sys

from lander.server import main

sys.exit(main())
