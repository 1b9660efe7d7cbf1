"""CLI entry point for python -m clipforge.cli"""
from clipforge.cli.commands import app

if __name__ == "__main__":
    app()
