"""sequent command-line interface."""

from sequent.cli.app import app

__all__ = ["app"]
