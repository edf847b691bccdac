"""
Charge Policy

Every debit sent through a transfer channel costs a flat service charge.

DESIGN DECISION: The charge is a fixed fee per channel. It does NOT
scale with the amount. A 1 BDT transfer and a 1,000,000 BDT transfer
over RTGS cost the same.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from src.models.transaction import DebitType


# Flat fees in BDT
FIXED_CHARGES: dict[DebitType, Decimal] = {
    DebitType.BEFTN: Decimal("0"),    # Free
    DebitType.NPSB: Decimal("10"),
    DebitType.RTGS: Decimal("100"),
}

NO_CHARGE = Decimal("0")


def _as_debit_type(debit_type: Union[DebitType, str, None]) -> Optional[DebitType]:
    if debit_type is None or isinstance(debit_type, DebitType):
        return debit_type
    try:
        return DebitType(str(debit_type).strip().upper())
    except ValueError:
        return None


def calculate_charge(
    amount: Optional[Decimal],
    debit_type: Union[DebitType, str, None],
) -> Decimal:
    """
    Service charge for a debit.

    Returns 0 when there is no debit type, no amount, a non-positive
    amount, or a channel we don't know. Otherwise the channel's flat fee.
    """
    if debit_type is None or amount is None:
        return NO_CHARGE
    try:
        if Decimal(str(amount)) <= 0:
            return NO_CHARGE
    except InvalidOperation:
        return NO_CHARGE

    channel = _as_debit_type(debit_type)
    if channel is None:
        return NO_CHARGE
    return FIXED_CHARGES.get(channel, NO_CHARGE)
