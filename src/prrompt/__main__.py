"""Allow running prrompt as ``python -m prrompt``."""

from prrompt.cli import app

if __name__ == "__main__":
    app()
