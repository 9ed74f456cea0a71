import sys

from monitor.handler import main

sys.exit(main())
