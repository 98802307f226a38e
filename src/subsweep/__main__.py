import sys

from subsweep.app import main

sys.exit(main())
