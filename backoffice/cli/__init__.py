"""CLI commands package."""
from backoffice.cli.invoices import mark_overdue_invoices_command
from backoffice.cli.seed import seed_reference_data_command
from backoffice.cli.tokens import cleanup_expired_tokens_command

__all__ = [
    "mark_overdue_invoices_command",
    "cleanup_expired_tokens_command",
    "seed_reference_data_command",
]
