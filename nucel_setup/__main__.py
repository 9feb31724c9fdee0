"""
Entry point for running nucel-setup as a module.

Usage: python -m nucel_setup [command] [options]
"""

from nucel_setup.cli.parser import main

if __name__ == "__main__":
    main()
