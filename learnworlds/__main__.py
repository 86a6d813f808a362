import sys

from learnworlds.cli import main

sys.exit(main())
