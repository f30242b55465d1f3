"""
Implementation of the Transaction class for the ledger.

A transaction claims existing outputs through its inputs and creates new
outputs. Each input carries a signature over the per-input signable payload
returned by Transaction.get_raw_data_to_sign.
"""

from typing import List, Dict, Any, Optional, Union
import hashlib
from ledger_utxo.utxo import UTXO
from .amount import MAX_VALUE, MIN_VALUE

MAX_OUTPUT_INDEX = 2 ** 32 - 1


def _compact_size(value: int) -> bytes:
    """Bitcoin-style variable length integer used for counts and length prefixes."""
    if value < 0xfd:
        return value.to_bytes(1, "little")
    elif value <= 0xffff:
        return b"\xfd" + value.to_bytes(2, "little")
    elif value <= 0xffffffff:
        return b"\xfe" + value.to_bytes(4, "little")
    return b"\xff" + value.to_bytes(8, "little")


def _encode_bytes(data: bytes) -> bytes:
    return _compact_size(len(data)) + data


def _encode_index(index: int) -> bytes:
    return index.to_bytes(4, "big")


def _encode_value(value: int) -> bytes:
    return value.to_bytes(8, "big", signed=True)


class TransactionInput:
    """
    Represents an input to a transaction (a claim on an existing output).

    Attributes:
        prev_tx_hash (bytes): Hash of the transaction whose output is claimed
        output_index (int): Index of the claimed output in that transaction
        signature (Optional[bytes]): Signature authorizing the spend
    """

    def __init__(self, prev_tx_hash: bytes, output_index: int, signature: Optional[bytes] = None):
        if not isinstance(prev_tx_hash, (bytes, bytearray)):
            raise ValueError("prev_tx_hash must be bytes")
        if isinstance(output_index, bool) or not isinstance(output_index, int):
            raise ValueError(f"Invalid output index: {output_index!r}")
        if not 0 <= output_index <= MAX_OUTPUT_INDEX:
            raise ValueError(f"Output index {output_index} out of range")

        self.prev_tx_hash = bytes(prev_tx_hash)
        self.output_index = output_index
        self.signature = None if signature is None else bytes(signature)

    def add_signature(self, signature: Optional[bytes]) -> None:
        self.signature = None if signature is None else bytes(signature)

    def to_utxo(self) -> UTXO:
        """Spend reference this input claims."""
        return UTXO(self.prev_tx_hash, self.output_index)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "prev_tx_hash": self.prev_tx_hash.hex(),
            "output_index": self.output_index,
            "signature": self.signature.hex() if self.signature is not None else None
        }

    def __repr__(self) -> str:
        return f"TransactionInput(prev_tx_hash={self.prev_tx_hash.hex()}, output_index={self.output_index})"


class TransactionOutput:
    """
    Represents an output created by a transaction.

    Values are integer minor units. Non-positive values are representable so
    that the validator, not the model, decides whether they are acceptable.
    Outputs are immutable: the same object may be held by a transaction and
    by any number of pools.

    Attributes:
        value (int): Amount in minor units
        address (bytes): Recipient's public key
    """

    __slots__ = ("_value", "_address")

    def __init__(self, value: int, address: bytes):
        """
        Initialize an output.

        Args:
            value: Amount in minor units
            address: Recipient's public key

        Raises:
            ValueError: If value is not an integer in the signed 64-bit range
                or address is not bytes
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("Output value must be an integer number of minor units")
        if not MIN_VALUE <= value <= MAX_VALUE:
            raise ValueError(f"Output value {value} out of range")
        if not isinstance(address, (bytes, bytearray)):
            raise ValueError("Output address must be bytes")

        self._value = value
        self._address = bytes(address)

    @property
    def value(self) -> int:
        return self._value

    @property
    def address(self) -> bytes:
        return self._address

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "value": self.value,
            "address": self.address.hex()
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransactionOutput):
            return NotImplemented
        return self.value == other.value and self.address == other.address

    def __hash__(self) -> int:
        return hash((self.value, self.address))

    def __repr__(self) -> str:
        return f"TransactionOutput(value={self.value}, address={self.address.hex()})"


class Transaction:
    """
    Represents a ledger transaction.

    Attributes:
        inputs (List[TransactionInput]): Claims on existing outputs, in order
        outputs (List[TransactionOutput]): New outputs, in order; an output's
            position is part of its spend reference
        tx_hash (Optional[bytes]): Transaction identity, set by finalize() or
            assigned by the caller
    """

    def __init__(
        self,
        inputs: Optional[List[TransactionInput]] = None,
        outputs: Optional[List[TransactionOutput]] = None,
        tx_hash: Optional[bytes] = None
    ):
        self.inputs: List[TransactionInput] = list(inputs or [])
        self.outputs: List[TransactionOutput] = list(outputs or [])
        self.tx_hash = None if tx_hash is None else bytes(tx_hash)

    def add_input(self, prev_tx_hash: bytes, output_index: int) -> None:
        self.inputs.append(TransactionInput(prev_tx_hash, output_index))

    def add_output(self, value: int, address: bytes) -> None:
        self.outputs.append(TransactionOutput(value, address))

    def remove_input(self, target: Union[int, UTXO]) -> None:
        """
        Remove an input by position or by the reference it claims.

        Args:
            target: Input index, or the UTXO the input claims. When several
                inputs claim the same UTXO only the first is removed.

        Raises:
            ValueError: If the index is out of range or no input claims the UTXO
        """
        if isinstance(target, UTXO):
            for i, tx_input in enumerate(self.inputs):
                if tx_input.to_utxo() == target:
                    del self.inputs[i]
                    return
            raise ValueError(f"No input claims {target!r}")

        self._check_input_index(target)
        del self.inputs[target]

    def add_signature(self, signature: bytes, index: int) -> None:
        self._check_input_index(index)
        self.inputs[index].add_signature(signature)

    def get_input(self, index: int) -> TransactionInput:
        self._check_input_index(index)
        return self.inputs[index]

    def get_output(self, index: int) -> TransactionOutput:
        if not 0 <= index < len(self.outputs):
            raise ValueError(f"Output index {index} out of range")
        return self.outputs[index]

    def num_inputs(self) -> int:
        return len(self.inputs)

    def num_outputs(self) -> int:
        return len(self.outputs)

    def get_hash(self) -> Optional[bytes]:
        return self.tx_hash

    def get_raw_data_to_sign(self, index: int) -> bytes:
        """
        Build the payload that input `index` must be signed over.

        Layout: len | prev_tx_hash | output_index (4 bytes) | output count |
        for each output: value (8 bytes, signed) | len | address.
        Lengths and counts are compact-size encoded so no two different
        output sets share a payload. Signatures are never part of it.

        Args:
            index: Position of the input being signed

        Returns:
            bytes: Signable payload

        Raises:
            ValueError: If index is out of range
        """
        self._check_input_index(index)
        tx_input = self.inputs[index]

        parts = [_encode_bytes(tx_input.prev_tx_hash), _encode_index(tx_input.output_index)]
        parts.append(self._encode_outputs())
        return b"".join(parts)

    def get_raw_tx(self) -> bytes:
        """
        Serialize the whole transaction, signatures included.

        Returns:
            bytes: Input count, every input (len | prev_tx_hash, index,
            len | signature, with length 0 when unsigned), then the outputs
            encoded as in get_raw_data_to_sign
        """
        parts: List[bytes] = [_compact_size(len(self.inputs))]
        for tx_input in self.inputs:
            parts.append(_encode_bytes(tx_input.prev_tx_hash))
            parts.append(_encode_index(tx_input.output_index))
            parts.append(_encode_bytes(tx_input.signature or b""))
        parts.append(self._encode_outputs())
        return b"".join(parts)

    def _encode_outputs(self) -> bytes:
        parts = [_compact_size(len(self.outputs))]
        for output in self.outputs:
            parts.append(_encode_value(output.value))
            parts.append(_encode_bytes(output.address))
        return b"".join(parts)

    def finalize(self) -> bytes:
        """
        Compute and store the transaction hash (SHA-256 of get_raw_tx()).

        Call after every input has been signed; the hash covers signatures.

        Returns:
            bytes: The new transaction hash
        """
        self.tx_hash = hashlib.sha256(self.get_raw_tx()).digest()
        return self.tx_hash

    def _check_input_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise ValueError(f"Invalid input index: {index!r}")
        if not 0 <= index < len(self.inputs):
            raise ValueError(f"Input index {index} out of range")

    def to_dict(self) -> Dict[str, Any]:
        """Convert transaction to dictionary for serialization."""
        return {
            "tx_hash": self.tx_hash.hex() if self.tx_hash is not None else None,
            "inputs": [inp.to_dict() for inp in self.inputs],
            "outputs": [out.to_dict() for out in self.outputs]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], verify_hash: bool = True) -> 'Transaction':
        """
        Create transaction from dictionary representation.

        Args:
            data: Dictionary with transaction data, as produced by to_dict()
            verify_hash: Recompute the hash and require it to match the
                stored one (when a hash is stored)

        Returns:
            New Transaction instance

        Raises:
            ValueError: If data is malformed or the hash does not match
        """
        try:
            inputs = [
                TransactionInput(
                    prev_tx_hash=bytes.fromhex(inp["prev_tx_hash"]),
                    output_index=inp["output_index"],
                    signature=bytes.fromhex(inp["signature"]) if inp.get("signature") is not None else None
                )
                for inp in data["inputs"]
            ]
            outputs = [
                TransactionOutput(
                    value=out["value"],
                    address=bytes.fromhex(out["address"])
                )
                for out in data["outputs"]
            ]
            stored_hash = data.get("tx_hash")
            tx_hash = bytes.fromhex(stored_hash) if stored_hash is not None else None
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Error deserializing transaction: {str(e)}") from e

        tx = cls(inputs=inputs, outputs=outputs, tx_hash=tx_hash)

        if verify_hash and tx_hash is not None:
            expected = hashlib.sha256(tx.get_raw_tx()).digest()
            if expected != tx_hash:
                raise ValueError("Transaction hash mismatch")

        return tx

    def __repr__(self) -> str:
        tx_hash = self.tx_hash.hex() if self.tx_hash is not None else None
        return f"Transaction(tx_hash={tx_hash}, inputs={len(self.inputs)}, outputs={len(self.outputs)})"
