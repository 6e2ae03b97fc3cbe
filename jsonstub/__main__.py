import sys

from jsonstub.cli import main

sys.exit(main())
