import sys

from turbotest.cli import main

sys.exit(main())
