"""
Ledger - Crypto Module

Signature helpers backing the transaction handler's signature checks.
"""

from .signature import generate_keypair, private_key_to_public_key, sign_message, verify_signature

__all__ = ['generate_keypair', 'private_key_to_public_key', 'sign_message', 'verify_signature']
