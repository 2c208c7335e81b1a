"""prrompt - split prompt file changes out of commits onto their own branch."""

__version__ = "0.1.0"
