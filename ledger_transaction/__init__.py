"""
Ledger - Transaction Module

This module implements the transaction model: inputs that claim existing
outputs, the outputs a transaction creates, per-input signable payloads,
and fixed-point amount helpers.
"""

from .transaction import Transaction, TransactionInput, TransactionOutput
from .amount import COIN, to_minor_units, format_amount

__all__ = [
    'Transaction',
    'TransactionInput',
    'TransactionOutput',
    'COIN',
    'to_minor_units',
    'format_amount',
]
