"""
Shared fixtures for the handler tests.
"""

from typing import Sequence, Tuple

import pytest
from ledger_crypto.signature import generate_keypair, sign_message
from ledger_transaction.transaction import Transaction, TransactionOutput
from ledger_utxo.pool import UTXOPool
from ledger_utxo.utxo import UTXO

GENESIS_HASH = b"\x00" * 32
G0 = UTXO(GENESIS_HASH, 0)
G1 = UTXO(GENESIS_HASH, 1)
G2 = UTXO(GENESIS_HASH, 2)


def build_tx(
    inputs: Sequence[Tuple[UTXO, bytes]],
    outputs: Sequence[Tuple[int, bytes]]
) -> Transaction:
    """
    Build, sign and finalize a transaction.

    Args:
        inputs: (claimed UTXO, private key to sign with) pairs
        outputs: (value, recipient public key) pairs
    """
    tx = Transaction()
    for utxo, _ in inputs:
        tx.add_input(utxo.tx_hash, utxo.index)
    for value, address in outputs:
        tx.add_output(value, address)
    for index, (_, private_key) in enumerate(inputs):
        tx.add_signature(sign_message(private_key, tx.get_raw_data_to_sign(index)), index)
    tx.finalize()
    return tx


@pytest.fixture(scope="session")
def alice():
    return generate_keypair()


@pytest.fixture(scope="session")
def bob():
    return generate_keypair()


@pytest.fixture(scope="session")
def carol():
    return generate_keypair()


@pytest.fixture
def genesis_pool(alice, bob):
    """Alice owns 100 at genesis:0 and 50 at genesis:1; Bob owns 20 at genesis:2."""
    pool = UTXOPool()
    pool.add_utxo(G0, TransactionOutput(100, alice[1]))
    pool.add_utxo(G1, TransactionOutput(50, alice[1]))
    pool.add_utxo(G2, TransactionOutput(20, bob[1]))
    return pool


@pytest.fixture
def make_tx():
    return build_tx
