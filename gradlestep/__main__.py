"""
Entry point for running gradlestep as a module.

Usage: python -m gradlestep [command] [options]
"""

from gradlestep.cli.parser import main

if __name__ == "__main__":
    main()
