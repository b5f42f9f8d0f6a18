"""Allow running the client as ``python -m gcs_multipart``."""

import sys

from gcs_multipart.cli import main

sys.exit(main())
