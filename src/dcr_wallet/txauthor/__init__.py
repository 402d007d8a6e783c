"""Transaction authoring engine.

Builds unsigned transactions from pre-selected inputs and payment
destinations: send amounts, change allocation, size estimation, fee and
dust policy, and change position randomization.
"""

from dcr_wallet.txauthor.author import ChangeAddressProvider, author_transaction
from dcr_wallet.txauthor.builder import TxAuthor, TxFeeAndSize
from dcr_wallet.txauthor.models import (
    AuthoredTransaction,
    SelectedInput,
    SigScriptClass,
    TransactionDestination,
)

__all__ = [
    "AuthoredTransaction",
    "ChangeAddressProvider",
    "SelectedInput",
    "SigScriptClass",
    "TransactionDestination",
    "TxAuthor",
    "TxFeeAndSize",
    "author_transaction",
]
