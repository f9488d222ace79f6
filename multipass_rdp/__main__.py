"""Allow ``python -m multipass_rdp``."""

import sys

from multipass_rdp import cli

sys.exit(cli.main())
