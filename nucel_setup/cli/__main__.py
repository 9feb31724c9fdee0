"""
Entry point for running the nucel-setup CLI as a module.

Usage: python -m nucel_setup.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
