"""Entry point for CLI invocation via python -m."""

from SecureWsdlImporter.cli import run

if __name__ == "__main__":
    run()
