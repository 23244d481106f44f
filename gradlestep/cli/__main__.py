"""
Entry point for running gradlestep CLI as a module.

Usage: python -m gradlestep.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
