"""
Entry point for python -m revstamp

Allows running the package as a module:
    python -m revstamp --format "{semvertag}+{chash:7}"
"""

from .cli import main

if __name__ == '__main__':
    main()
