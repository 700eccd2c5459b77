import sys

from streamhdfs.cli import main

sys.exit(main())
