import sys

from echolocation.cli import main

sys.exit(main())
