"""
Convenience entry point for running groomslot as a module.

Usage: python -m groomslot [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
