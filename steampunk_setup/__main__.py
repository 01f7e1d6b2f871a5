import sys

from steampunk_setup.pipeline import main

sys.exit(main())
