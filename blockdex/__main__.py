"""Allow running blockdex with ``python -m blockdex``."""

from blockdex.cli import app

if __name__ == "__main__":
    app()
