"""
Ledger - Handler Module

This module implements transaction acceptance: per-transaction validation
against the UTXO pool and fixed-point resolution of one epoch's batch.
"""

from .handler import TxHandler, ValidationContext

__all__ = ['TxHandler', 'ValidationContext']
