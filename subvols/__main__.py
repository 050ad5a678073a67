import sys

from subvols.main import main

if __name__ == '__main__':
	sys.exit(main())
