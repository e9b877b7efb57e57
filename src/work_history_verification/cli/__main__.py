"""
Entry point for ``python -m work_history_verification.cli``.
"""

import sys

from work_history_verification.cli.verify import main

if __name__ == "__main__":
    sys.exit(main())
