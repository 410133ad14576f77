import sys

from sky_gradient.main import main

if __name__ == "__main__":
    sys.exit(main())
