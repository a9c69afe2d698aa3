# -*- coding: UTF-8 -*-

import sys

from swdemangle.cli import main

if __name__ == '__main__':
    sys.exit(main())
