import sys

from tracepath.cli.main import main

sys.exit(main())
