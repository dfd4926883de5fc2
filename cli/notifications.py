"""Notifications printed to the terminal."""

import click


class ClickNotifier:
    """Echoes notifications to stderr so stdout stays free for document text."""

    def info(self, message: str) -> None:
        click.echo(f"ℹ {message}", err=True)

    def warning(self, message: str) -> None:
        click.echo(f"⚠ {message}", err=True)

    def error(self, message: str) -> None:
        click.echo(f"❌ {message}", err=True)
