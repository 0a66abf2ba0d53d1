"""
Entry point for running bdd_reporter as a module.

Usage:
    python -m bdd_reporter [command] [options]
"""

from bdd_reporter.cli import main

if __name__ == "__main__":
    main()
