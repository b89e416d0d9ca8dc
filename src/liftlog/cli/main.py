"""
CLI entry point using Typer.

Importing the command modules registers their commands on the shared app:
- sessions: init, start, end, select, log, delete-set, superset, show, history, compare, summary
- analysis: prs, progress, volume, stats
- profile: profile, weight, energy
- library: exercises, add-exercise, templates, apply-template, save-template, delete-template
"""

from .app import app
from .commands import analysis, library, profile, sessions  # noqa: F401

if __name__ == "__main__":
    app()
