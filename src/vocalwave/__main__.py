import sys

from vocalwave.cli import main

sys.exit(main())
