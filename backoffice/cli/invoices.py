"""CLI command for the overdue invoice sweep."""
import click
from flask import current_app
from flask.cli import with_appcontext


@click.command("mark-overdue-invoices")
@with_appcontext
def mark_overdue_invoices_command():
    """
    Move issued invoices past their due date to EN_RETARD.

    Intended to run daily from cron.

    Usage:
        flask mark-overdue-invoices
    """
    from backoffice.extensions import db

    container = current_app.container
    container.db_session.override(db.session)

    count = container.invoice_service().mark_overdue_invoices()
    click.echo(f"Invoices marked overdue: {count}")
