import sys

from procrec.recorder import main

if __name__ == "__main__":
    sys.exit(main())
