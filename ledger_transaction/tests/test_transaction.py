"""
Tests for the Transaction class.
"""

import hashlib
import pytest
from ledger_utxo.utxo import UTXO
from ledger_transaction.transaction import (
    Transaction,
    TransactionInput,
    TransactionOutput
)

PREV_HASH = b"\xaa" * 32
ADDRESS = b"\x02" + b"\x55" * 32


@pytest.fixture
def sample_tx():
    """Create a two-input, two-output transaction."""
    tx = Transaction()
    tx.add_input(PREV_HASH, 0)
    tx.add_input(PREV_HASH, 1)
    tx.add_output(70, ADDRESS)
    tx.add_output(30, b"\x03" + b"\x66" * 32)
    return tx


def test_transaction_input():
    """Test TransactionInput creation and serialization."""
    tx_input = TransactionInput(prev_tx_hash=PREV_HASH, output_index=2, signature=b"\x30\x01")

    assert tx_input.prev_tx_hash == PREV_HASH
    assert tx_input.output_index == 2
    assert tx_input.signature == b"\x30\x01"
    assert tx_input.to_utxo() == UTXO(PREV_HASH, 2)

    data = tx_input.to_dict()
    assert data["prev_tx_hash"] == PREV_HASH.hex()
    assert data["output_index"] == 2
    assert data["signature"] == "3001"

    with pytest.raises(ValueError, match="out of range"):
        TransactionInput(prev_tx_hash=PREV_HASH, output_index=2 ** 32)


def test_transaction_output():
    """Test TransactionOutput creation and validation."""
    output = TransactionOutput(value=10, address=ADDRESS)
    assert output.value == 10
    assert output.address == ADDRESS
    assert output == TransactionOutput(10, ADDRESS)
    assert output.to_dict() == {"value": 10, "address": ADDRESS.hex()}

    # Non-positive values are representable; the handler rejects them
    assert TransactionOutput(value=0, address=ADDRESS).value == 0
    assert TransactionOutput(value=-5, address=ADDRESS).value == -5

    with pytest.raises(ValueError, match="integer number of minor units"):
        TransactionOutput(value=1.5, address=ADDRESS)

    with pytest.raises(ValueError, match="out of range"):
        TransactionOutput(value=2 ** 63, address=ADDRESS)

    with pytest.raises(ValueError, match="address must be bytes"):
        TransactionOutput(value=1, address="0x1234")


def test_builder_methods(sample_tx):
    """Test adding, reading and removing inputs and outputs."""
    assert sample_tx.num_inputs() == 2
    assert sample_tx.num_outputs() == 2
    assert sample_tx.get_input(1).output_index == 1
    assert sample_tx.get_output(0).value == 70

    sample_tx.remove_input(UTXO(PREV_HASH, 0))
    assert sample_tx.num_inputs() == 1
    assert sample_tx.get_input(0).output_index == 1

    sample_tx.remove_input(0)
    assert sample_tx.num_inputs() == 0

    with pytest.raises(ValueError, match="No input claims"):
        sample_tx.remove_input(UTXO(PREV_HASH, 0))

    with pytest.raises(ValueError, match="out of range"):
        sample_tx.get_input(0)

    with pytest.raises(ValueError, match="out of range"):
        sample_tx.get_output(5)


def test_raw_data_to_sign(sample_tx):
    """The signable payload covers one input and every output, never signatures."""
    expected = (
        b"\x20" + PREV_HASH
        + (1).to_bytes(4, "big")
        + b"\x02"
        + (70).to_bytes(8, "big", signed=True) + b"\x21" + ADDRESS
        + (30).to_bytes(8, "big", signed=True) + b"\x21" + b"\x03" + b"\x66" * 32
    )
    assert sample_tx.get_raw_data_to_sign(1) == expected
    assert sample_tx.get_raw_data_to_sign(0) != sample_tx.get_raw_data_to_sign(1)

    before = sample_tx.get_raw_data_to_sign(0)
    sample_tx.add_signature(b"\x30\x44", 0)
    assert sample_tx.get_raw_data_to_sign(0) == before

    with pytest.raises(ValueError, match="out of range"):
        sample_tx.get_raw_data_to_sign(2)


def test_split_outputs_change_payload():
    """One output whose address embeds a second output is not the same as two outputs."""
    second_address = b"\x03" + b"\x77" * 32
    merged = Transaction()
    merged.add_input(PREV_HASH, 0)
    merged.add_output(90, ADDRESS + (5).to_bytes(8, "big", signed=True) + second_address)

    split = Transaction()
    split.add_input(PREV_HASH, 0)
    split.add_output(90, ADDRESS)
    split.add_output(5, second_address)

    assert merged.get_raw_data_to_sign(0) != split.get_raw_data_to_sign(0)
    assert merged.get_raw_tx() != split.get_raw_tx()


def test_negative_values_serialize(sample_tx):
    """Invalid values still produce a payload so the handler can reject them."""
    sample_tx.add_output(-1, ADDRESS)
    assert sample_tx.get_raw_data_to_sign(0).endswith(
        (-1).to_bytes(8, "big", signed=True) + b"\x21" + ADDRESS
    )


def test_output_is_immutable():
    """Outputs can be shared between transactions and pools without copying."""
    output = TransactionOutput(value=10, address=ADDRESS)

    with pytest.raises(AttributeError):
        output.value = 10 ** 12

    with pytest.raises(AttributeError):
        output.address = b"\x02"

    with pytest.raises(AttributeError):
        output.extra = 1

    assert output == TransactionOutput(10, ADDRESS)
    assert hash(output) == hash(TransactionOutput(10, ADDRESS))


def test_finalize(sample_tx):
    """The hash is SHA-256 of the raw transaction and covers signatures."""
    assert sample_tx.get_hash() is None

    unsigned_hash = sample_tx.finalize()
    assert unsigned_hash == hashlib.sha256(sample_tx.get_raw_tx()).digest()
    assert sample_tx.tx_hash == unsigned_hash

    sample_tx.add_signature(b"\x30\x01\x02", 1)
    assert sample_tx.finalize() != unsigned_hash


def test_serialization(sample_tx):
    """Test to_dict / from_dict."""
    sample_tx.add_signature(b"\x30\x01", 0)
    sample_tx.finalize()

    data = sample_tx.to_dict()
    restored = Transaction.from_dict(data)

    assert restored.tx_hash == sample_tx.tx_hash
    assert restored.get_input(0).signature == b"\x30\x01"
    assert restored.get_input(1).signature is None
    assert restored.outputs == sample_tx.outputs

    data["outputs"][0]["value"] = 71
    with pytest.raises(ValueError, match="hash mismatch"):
        Transaction.from_dict(data)

    # Caller-assigned identities can skip verification
    assert Transaction.from_dict(data, verify_hash=False).get_output(0).value == 71

    with pytest.raises(ValueError, match="Error deserializing"):
        Transaction.from_dict({"inputs": []})
