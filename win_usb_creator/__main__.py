"""Allow running as ``python -m win_usb_creator``."""

import sys

from win_usb_creator.main import main

sys.exit(main())
