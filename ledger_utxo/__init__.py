"""
Ledger - UTXO Module

This module implements the unspent transaction output registry: the UTXO
spend reference and the UTXOPool that maps references to spendable outputs.
"""

from .utxo import UTXO
from .pool import UTXOPool

__all__ = ['UTXO', 'UTXOPool']
