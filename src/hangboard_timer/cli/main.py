"""
CLI entry point using Typer.

Provides commands for hangboard sessions:
- start: Run a live timed session
- history / show / delete-record: Browse and edit past sessions
- log: Enter a session done without the timer
- export / import: Move history between machines
- weights / adjust-weight / reset-weights: Manage per-hold weights
- progress / workouts: Weight trends and available programs
"""

from .app import app
from .commands import history, progress, session, weights  # noqa: F401  (registers commands)

if __name__ == "__main__":
    app()
