import sys

from taskdash.interface.cli import main

if __name__ == "__main__":
    sys.exit(main())
