import sys

from pubsuggest.cli import main

sys.exit(main())
