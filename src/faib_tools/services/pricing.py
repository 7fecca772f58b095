"""
Renewal pricing calculator.

Calculates FAIB membership renewal fees from the number of certificates a
training provider issued in the previous year and the number of trainers
they are renewing.

Amounts are kept as exact Decimals throughout; rounding to pence happens
only when a breakdown is formatted or serialized.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

logger = logging.getLogger(__name__)

VAT_RATE = Decimal("0.20")
TRAINER_FEE = Decimal("20")  # Per trainer, ex VAT
PENCE = Decimal("0.01")


@dataclass(frozen=True)
class PricingBracket:
    """A contiguous range of certificate counts mapped to one flat fee."""

    min: int
    max: Optional[int]  # None for the top bracket (no upper limit)
    price_ex_vat: Decimal

    def contains(self, count: int) -> bool:
        return count >= self.min and (self.max is None or count <= self.max)


# Pricing brackets from 01/01/2025, ascending by min
PRICING_BRACKETS: tuple[PricingBracket, ...] = (
    PricingBracket(0, 500, Decimal("350")),
    PricingBracket(501, 750, Decimal("475")),
    PricingBracket(751, 1000, Decimal("575")),
    PricingBracket(1001, 1500, Decimal("700")),
    PricingBracket(1501, 2000, Decimal("1050")),
    PricingBracket(2001, 2500, Decimal("1400")),
    PricingBracket(2501, 3000, Decimal("1750")),
    PricingBracket(3001, 3500, Decimal("2100")),
    PricingBracket(3501, 4000, Decimal("2450")),
    PricingBracket(4001, 4500, Decimal("2800")),
    PricingBracket(4501, 5000, Decimal("3150")),
    PricingBracket(5001, 6000, Decimal("3500")),
    PricingBracket(6001, 7000, Decimal("3850")),
    PricingBracket(7001, 8000, Decimal("4200")),
    PricingBracket(8001, 9000, Decimal("4550")),
    PricingBracket(9001, 10000, Decimal("4900")),
    PricingBracket(10001, 15000, Decimal("5250")),
    PricingBracket(15001, None, Decimal("5250")),  # Same price as 10,001-15,000
)


@dataclass(frozen=True)
class PricingBreakdown:
    """Itemized result of one renewal pricing calculation."""

    certificates_issued: int
    number_of_trainers: int

    # Base membership fee
    membership_fee_ex_vat: Decimal
    membership_vat: Decimal
    membership_fee_inc_vat: Decimal

    # Trainer fees
    trainer_fee_ex_vat: Decimal
    trainer_vat: Decimal
    trainer_fee_inc_vat: Decimal

    # Totals
    total_ex_vat: Decimal
    total_vat: Decimal
    total_inc_vat: Decimal

    bracket_description: str

    def to_dict(self) -> dict:
        """JSON-friendly rendering, amounts rounded to pence."""
        return {
            "certificates_issued": self.certificates_issued,
            "number_of_trainers": self.number_of_trainers,
            "bracket": self.bracket_description,
            "membership_fee": {
                "ex_vat": to_pounds(self.membership_fee_ex_vat),
                "vat": to_pounds(self.membership_vat),
                "inc_vat": to_pounds(self.membership_fee_inc_vat),
            },
            "trainer_fee": {
                "ex_vat": to_pounds(self.trainer_fee_ex_vat),
                "vat": to_pounds(self.trainer_vat),
                "inc_vat": to_pounds(self.trainer_fee_inc_vat),
            },
            "total": {
                "ex_vat": to_pounds(self.total_ex_vat),
                "vat": to_pounds(self.total_vat),
                "inc_vat": to_pounds(self.total_inc_vat),
            },
        }


def round_pence(amount: Decimal) -> Decimal:
    """Round an amount to 2 decimal places (standard currency rounding)."""
    return amount.quantize(PENCE, rounding=ROUND_HALF_UP)


def to_pounds(amount: Decimal) -> float:
    return float(round_pence(amount))


def format_money(amount: Decimal) -> str:
    return f"£{round_pence(amount)}"


def find_pricing_bracket(certificates_issued: int) -> PricingBracket:
    """Find the pricing bracket for a certificate count."""
    for bracket in PRICING_BRACKETS:
        if bracket.contains(certificates_issued):
            return bracket

    # Unreachable while the table covers [0, inf)
    logger.warning(
        "No pricing bracket matched %s certificates, using the highest bracket",
        certificates_issued,
    )
    return PRICING_BRACKETS[-1]


def get_bracket_description(bracket: PricingBracket) -> str:
    """
    Human-readable bracket label, e.g. "1,001-1,500 certificates".

    The open-ended top bracket is labelled by the threshold it exceeds
    ("15,000+ certificates").
    """
    if bracket.max is None:
        threshold = max(bracket.min - 1, 0)
        return f"{threshold:,}+ certificates"
    return f"{bracket.min:,}-{bracket.max:,} certificates"


def calculate_renewal_pricing(certificates_issued: int, number_of_trainers: int) -> PricingBreakdown:
    """
    Calculate renewal pricing with a detailed breakdown.

    VAT is applied to the membership fee and the trainer fee separately and
    then summed. Negative inputs are clamped to zero.
    """
    if certificates_issued < 0 or number_of_trainers < 0:
        logger.warning(
            "Negative pricing input clamped to zero (certificates=%s, trainers=%s)",
            certificates_issued,
            number_of_trainers,
        )
    certificates_issued = max(0, int(certificates_issued))
    number_of_trainers = max(0, int(number_of_trainers))

    bracket = find_pricing_bracket(certificates_issued)

    # Membership fee
    membership_fee_ex_vat = bracket.price_ex_vat
    membership_vat = membership_fee_ex_vat * VAT_RATE
    membership_fee_inc_vat = membership_fee_ex_vat + membership_vat

    # Trainer fees
    trainer_fee_ex_vat = number_of_trainers * TRAINER_FEE
    trainer_vat = trainer_fee_ex_vat * VAT_RATE
    trainer_fee_inc_vat = trainer_fee_ex_vat + trainer_vat

    # Totals
    total_ex_vat = membership_fee_ex_vat + trainer_fee_ex_vat
    total_vat = membership_vat + trainer_vat
    total_inc_vat = total_ex_vat + total_vat

    return PricingBreakdown(
        certificates_issued=certificates_issued,
        number_of_trainers=number_of_trainers,
        membership_fee_ex_vat=membership_fee_ex_vat,
        membership_vat=membership_vat,
        membership_fee_inc_vat=membership_fee_inc_vat,
        trainer_fee_ex_vat=trainer_fee_ex_vat,
        trainer_vat=trainer_vat,
        trainer_fee_inc_vat=trainer_fee_inc_vat,
        total_ex_vat=total_ex_vat,
        total_vat=total_vat,
        total_inc_vat=total_inc_vat,
        bracket_description=get_bracket_description(bracket),
    )
