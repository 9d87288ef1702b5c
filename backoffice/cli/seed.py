"""CLI command seeding roles and sample maritime reference data."""
import logging
from decimal import Decimal
from typing import Dict

import click
from flask.cli import with_appcontext

from backoffice.models.company import Company
from backoffice.models.enums import RoleName
from backoffice.models.operation import Operation
from backoffice.models.role import Role
from backoffice.models.ship import Ship
from backoffice.repositories.company_repository import CompanyRepository
from backoffice.repositories.operation_repository import OperationRepository
from backoffice.repositories.role_repository import RoleRepository
from backoffice.repositories.ship_repository import ShipRepository
from backoffice.utils.transaction import TransactionContext

logger = logging.getLogger(__name__)

ROLES = (
    (RoleName.ADMIN, "Administrateur", True),
    (RoleName.MANAGER, "Responsable facturation", False),
    (RoleName.OPERATOR, "Opérateur", False),
    (RoleName.VIEWER, "Consultation", False),
    (RoleName.USER, "Utilisateur", False),
)

SAMPLE_COMPANY = {
    "code": "MSC",
    "nom": "Mediterranean Shipping Company",
    "email": "facturation@msc.example",
    "telephone": "+221 33 000 00 00",
    "adresse": "Port Autonome de Dakar",
}

SAMPLE_SHIP = {
    "numero_imo": "9703291",
    "nom": "MSC Oscar",
    "pavillon": "Panama",
}

SAMPLE_OPERATIONS = (
    ("PILOT", "Pilotage", Decimal("150000.00"), Decimal("228.67")),
    ("REMORQ", "Remorquage", Decimal("250000.00"), Decimal("381.12")),
    ("AMARR", "Amarrage", Decimal("75000.00"), Decimal("114.34")),
    ("QUAI", "Droits de quai", Decimal("50000.00"), Decimal("76.22")),
)


class ReferenceDataSeeder:
    """Creates missing reference rows; existing rows are left untouched."""

    def __init__(self, session):
        self._session = session
        self._roles = RoleRepository(session)
        self._companies = CompanyRepository(session)
        self._ships = ShipRepository(session)
        self._operations = OperationRepository(session)

    def run(self) -> Dict[str, int]:
        stats = {"roles": 0, "companies": 0, "ships": 0, "operations": 0}

        with TransactionContext(self._session):
            for name, description, is_system in ROLES:
                if self._roles.find_by_name(name) is None:
                    self._session.add(
                        Role(name=name, description=description, is_system=is_system)
                    )
                    stats["roles"] += 1

            company = self._companies.find_by_code(SAMPLE_COMPANY["code"])
            if company is None:
                company = Company(**SAMPLE_COMPANY)
                self._session.add(company)
                self._session.flush()
                stats["companies"] += 1

            if self._ships.find_by_imo(SAMPLE_SHIP["numero_imo"]) is None:
                self._session.add(Ship(company_id=company.id, **SAMPLE_SHIP))
                stats["ships"] += 1

            for code, nom, prix_xof, prix_eur in SAMPLE_OPERATIONS:
                if self._operations.find_by_code(code) is None:
                    self._session.add(
                        Operation(code=code, nom=nom, prix_xof=prix_xof, prix_eur=prix_eur)
                    )
                    stats["operations"] += 1

        logger.info(f"Reference data seeded: {stats}")
        return stats


@click.command("seed-reference-data")
@with_appcontext
def seed_reference_data_command():
    """
    Seed roles, a sample company with one ship, and billable operations.

    Safe to run repeatedly.

    Usage:
        flask seed-reference-data
    """
    from backoffice.extensions import db

    stats = ReferenceDataSeeder(db.session).run()

    click.echo("Reference data seeded:")
    for key, val in stats.items():
        click.echo(f"  {key}: {val}")
