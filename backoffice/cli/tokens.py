"""CLI command purging stale verification and reset tokens."""
import click
from flask import current_app
from flask.cli import with_appcontext


@click.command("cleanup-expired-tokens")
@with_appcontext
def cleanup_expired_tokens_command():
    """
    Clear stale e-mail verification tokens and expired reset tokens.

    Usage:
        flask cleanup-expired-tokens
    """
    from backoffice.extensions import db

    container = current_app.container
    container.db_session.override(db.session)

    stats = container.auth_service().cleanup_expired_tokens()
    click.echo("Token cleanup complete:")
    for key, val in stats.items():
        click.echo(f"  {key}: {val}")
