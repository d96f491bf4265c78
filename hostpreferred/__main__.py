"""
Entry point for running hostpreferred as a module.

Usage: python -m hostpreferred [OPTIONS] COMMAND [ARGS]...
"""

from .cli import main

if __name__ == "__main__":
    main()
