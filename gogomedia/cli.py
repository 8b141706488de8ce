"""
Command-line interface for gogomedia

Thin click front end over MediaClient for manual use and scripting:
- account: register, login, logout, status
- media: list, add, update, delete, watch

Each command opens a client from the configured settings, runs one or two
operations and prints the outcome. Error outcomes are printed in red and exit
with status 1.
"""

import asyncio
import functools
import sys
from typing import Any, Awaitable, Callable

import click

from gogomedia import __version__
from gogomedia.client import MediaClient
from gogomedia.core.config import get_settings, reload_settings
from gogomedia.core.exceptions import GoGoMediaError
from gogomedia.core.logger import configure_from_settings, get_current_log_file, get_logger, setup_logging
from gogomedia.models import MediaRecord, Outcome, OutcomeKind

logger = get_logger(__name__)


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Configuration and storage errors become a red message and exit code 1;
    Ctrl+C exits with 130.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)
        except GoGoMediaError as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def run_with_client(action: Callable[[MediaClient], Awaitable[Any]]) -> Any:
    """Open a client from settings, run `action` with it and close it."""
    async def main():
        async with MediaClient.from_settings() as client:
            return await action(client)

    return asyncio.run(main())


def report(outcome: Outcome[Any], success_message: str | None = None) -> None:
    """Print an outcome; exit 1 when it is an error."""
    if outcome.kind is OutcomeKind.ERROR:
        click.echo(click.style(f"Error: {outcome.error}", fg='red'), err=True)
        sys.exit(1)
    if outcome.kind is OutcomeKind.NOT_LOGGED_IN:
        click.echo(click.style("Not logged in", fg='yellow'))
        return
    click.echo(success_message or outcome.message)


def format_record(record: MediaRecord) -> str:
    extras = ", ".join(f"{key}={value}" for key, value in sorted(record.extra.items()))
    line = f"[{record.id}] {record.name}"
    return f"{line} ({extras})" if extras else line


def format_records(value: MediaRecord | list[MediaRecord]) -> str:
    """One line per record; an update may answer with one record or a list"""
    records = [value] if isinstance(value, MediaRecord) else value
    return "\n".join(format_record(record) for record in records)


def parse_fields(ctx, param, values) -> dict[str, str]:
    """click callback turning repeated key=value options into a dict"""
    fields = {}
    for item in values:
        key, sep, value = item.partition('=')
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}")
        fields[key] = value
    return fields


def find_record(records: list[MediaRecord], media_id: str) -> MediaRecord | None:
    for record in records:
        if str(record.id) == media_id:
            return record
    return None


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
@handle_error
def cli(ctx, version, verbose, config):
    """
    GoGoMedia - keep your media catalog in sync

    Log in once; the session is remembered until you log out or the server
    rejects it.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"gogomedia v{__version__}")
        return

    if config:
        reload_settings(config)

    configure_from_settings()
    if verbose:
        settings = get_settings()
        setup_logging(level="DEBUG", colored_output=settings.logging.colored_output)
        logger.debug("Verbose mode enabled")

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument('username')
@click.password_option()
@handle_error
def register(username, password):
    """Create an account (does not log in)"""
    outcome = run_with_client(lambda client: client.register(username, password))
    report(outcome, f"Registered user: {username}")


@cli.command()
@click.argument('username')
@click.option('--password', prompt=True, hide_input=True)
@handle_error
def login(username, password):
    """Log in and remember the session"""
    async def action(client: MediaClient):
        outcome = await client.login(username, password)
        if outcome.ok:
            await client.wait_for_refresh()
        return outcome, client.collection

    outcome, records = run_with_client(action)
    report(outcome, f"Logged in as: {username}")
    if records is not None:
        click.echo(f"{len(records)} media entries")


@cli.command()
@handle_error
def logout():
    """Log out and forget the stored session"""
    outcome = run_with_client(lambda client: client.logout())
    report(outcome, "Successfully logged out")


@cli.command()
@handle_error
def status():
    """Show whether a session is stored"""
    async def action(client: MediaClient):
        return client.logged_in(), client.username

    active, username = run_with_client(action)
    if active:
        click.echo(click.style(f"Logged in as: {username}", fg='green'))
    else:
        click.echo(click.style("Not logged in", fg='yellow'))


@cli.command(name='list')
@handle_error
def list_media():
    """List your media entries"""
    outcome = run_with_client(lambda client: client.fetch())
    if not outcome.ok:
        report(outcome)
        return
    if not outcome.value:
        click.echo("No media entries")
    for record in outcome.value:
        click.echo(format_record(record))


@cli.command()
@click.argument('name')
@click.option('--field', 'fields', multiple=True, callback=parse_fields, help='Extra field as key=value')
@handle_error
def add(name, fields):
    """Add a media entry"""
    outcome = run_with_client(lambda client: client.add(MediaRecord(name=name, extra=fields)))
    report(outcome, f"Added: {format_record(outcome.value)}" if outcome.ok else None)


@cli.command()
@click.argument('media_id')
@click.option('--name', help='New name')
@click.option('--field', 'fields', multiple=True, callback=parse_fields, help='Field to set as key=value')
@handle_error
def update(media_id, name, fields):
    """Change a media entry"""
    async def action(client: MediaClient):
        fetched = await client.fetch()
        if not fetched.ok:
            return fetched
        record = find_record(fetched.value, media_id)
        if record is None:
            return Outcome.failure(f"No media entry with id {media_id}")
        changed = MediaRecord(
            id=record.id,
            name=name if name is not None else record.name,
            extra={**record.extra, **fields},
        )
        return await client.update(changed)

    outcome = run_with_client(action)
    report(outcome, f"Updated: {format_records(outcome.value)}" if outcome.ok else None)


@cli.command()
@click.argument('media_id')
@handle_error
def delete(media_id):
    """Delete a media entry"""
    async def action(client: MediaClient):
        fetched = await client.fetch()
        if not fetched.ok:
            return fetched
        record = find_record(fetched.value, media_id)
        if record is None:
            return Outcome.failure(f"No media entry with id {media_id}")
        return await client.delete(record)

    outcome = run_with_client(action)
    report(outcome, f"Deleted media entry {media_id}")


@cli.command()
@click.option('--interval', default=30, show_default=True, help='Seconds between refreshes')
@handle_error
def watch(interval):
    """Refresh periodically and print the list whenever it changes"""
    async def action(client: MediaClient):
        previous = None
        with client.subscribe() as subscription:
            while True:
                outcome = await client.fetch()
                if not outcome.ok:
                    return outcome
                snapshot = await subscription.get()
                if snapshot != previous:
                    click.echo(click.style(f"--- {len(snapshot)} media entries", fg='cyan'))
                    for record in snapshot:
                        click.echo(format_record(record))
                    previous = snapshot
                await asyncio.sleep(interval)

    report(run_with_client(action))


@cli.group()
def config():
    """Configuration management"""
    pass


@config.command()
@handle_error
def show():
    """
    Show current configuration

    Prints every setting by section, the active log file and any problem
    found in the values. Exits with status 1 when a problem is found.
    """
    settings = get_settings()

    click.echo("Current Configuration:")
    for section, values in settings.to_dict().items():
        click.echo(f"\n{section.capitalize()}:")
        for key, value in values.items():
            click.echo(f"   {key}: {value}")

    log_file = get_current_log_file()
    click.echo(f"\nLog file: {log_file if log_file else 'disabled'}")

    problems = settings.validate()
    if problems:
        click.echo(click.style("\nConfiguration problems:", fg='yellow'))
        for problem in problems:
            click.echo(f"   - {problem}")
        sys.exit(1)


if __name__ == '__main__':
    cli()
