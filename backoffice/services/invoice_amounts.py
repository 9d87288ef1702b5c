"""Invoice amount calculation.

All money values are ``Decimal``; VAT is rounded half-up to the cent.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LineAmounts:
    """Input for one invoice line."""
    quantite: Decimal
    prix_unitaire_xof: Decimal
    prix_unitaire_eur: Optional[Decimal] = None


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    vat: Decimal
    total: Decimal
    total_eur: Decimal


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_vat(amount: Decimal, rate) -> Decimal:
    """VAT on an amount for a percentage rate, rounded half-up to 2 places."""
    return round_money(to_decimal(amount) * to_decimal(rate) / HUNDRED)


def line_total_xof(line: LineAmounts) -> Decimal:
    return to_decimal(line.quantite) * to_decimal(line.prix_unitaire_xof)


def line_total_eur(line: LineAmounts) -> Optional[Decimal]:
    """EUR line total, or None when the line has no EUR price."""
    if line.prix_unitaire_eur is None:
        return None
    return to_decimal(line.quantite) * to_decimal(line.prix_unitaire_eur)


def calculate_totals(lines: Iterable[LineAmounts], taux_tva) -> InvoiceTotals:
    """
    Compute invoice totals from its lines.

    The EUR total sums only lines with a EUR price and gets VAT added
    only when positive. An empty line list yields zeros.
    """
    lines = list(lines)
    if not lines:
        return InvoiceTotals(ZERO, ZERO, ZERO, ZERO)

    subtotal = sum((line_total_xof(line) for line in lines), ZERO)
    vat = compute_vat(subtotal, taux_tva)
    total = subtotal + vat

    total_eur = sum(
        (amount for amount in map(line_total_eur, lines) if amount is not None), ZERO
    )
    if total_eur > ZERO:
        total_eur = total_eur + compute_vat(total_eur, taux_tva)

    return InvoiceTotals(
        subtotal=subtotal, vat=vat, total=total, total_eur=total_eur
    )
