"""Allow running as: python -m dep_autofill"""

from dep_autofill.main import cli

if __name__ == "__main__":
    cli()
