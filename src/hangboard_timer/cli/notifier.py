"""Terminal cues for a live session: bells and short Rich messages."""

from rich.console import Console


class TerminalNotifier:
    """
    Notifier that rings the terminal bell.

    Hang start/end and set completion also print a short line so the cue is
    visible when the terminal bell is muted.
    """

    def __init__(self, console: Console, quiet: bool = False):
        self.console = console
        self.quiet = quiet

    def _bell(self) -> None:
        if not self.quiet:
            self.console.bell()

    def on_hang_start(self) -> None:
        self._bell()
        self.console.print("[bold red]▲ Hang![/bold red]")

    def on_hang_end(self) -> None:
        self._bell()

    def on_countdown_tick(self) -> None:
        self._bell()

    def on_set_complete(self) -> None:
        self._bell()
        self.console.print("[bold green]✓ Set complete[/bold green]")
