import sys

from slog.cli import main

sys.exit(main())
