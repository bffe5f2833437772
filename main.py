"""
CodeWhisper try-it window entry point.

Run with:
    python main.py [--provider cerebras|openai] [--debug]
"""

import sys

# Require Python 3.10+ for the union-type hints used throughout the package.
if sys.version_info < (3, 10):
    sys.exit(
        "Python 3.10 or later is required.\n"
        f"You are running Python {sys.version_info.major}.{sys.version_info.minor}."
    )

from codewhisper.__main__ import main  # noqa: E402

if __name__ == "__main__":
    main()
