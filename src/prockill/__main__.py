import sys

from prockill.cli import main

if __name__ == "__main__":
    sys.exit(main())
