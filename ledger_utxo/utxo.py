"""
Implementation of the UTXO class for the ledger.

A UTXO here is the spend reference that names one output of one transaction:
the hash of the transaction that created it plus the output's position.
It is the key under which the output is tracked in a UTXOPool.
"""

from typing import Tuple


class UTXO:
    """
    Reference to a single transaction output.

    Attributes:
        tx_hash (bytes): Hash of the transaction the output belongs to
        index (int): Position of the output within that transaction
    """

    __slots__ = ("_tx_hash", "_index")

    def __init__(self, tx_hash: bytes, index: int):
        """
        Initialize a spend reference.

        Args:
            tx_hash: Hash of the creating transaction
            index: Output index within the creating transaction

        Raises:
            ValueError: If the hash is not bytes or the index is negative
        """
        if not isinstance(tx_hash, (bytes, bytearray)):
            raise ValueError("UTXO tx_hash must be bytes")
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise ValueError(f"Invalid output index: {index!r}")

        self._tx_hash = bytes(tx_hash)  # Copy so the key cannot change under the pool
        self._index = index

    @property
    def tx_hash(self) -> bytes:
        return self._tx_hash

    @property
    def index(self) -> int:
        return self._index

    def key(self) -> Tuple[bytes, int]:
        return (self._tx_hash, self._index)

    def __repr__(self) -> str:
        return f"UTXO(tx_hash={self._tx_hash.hex()}, index={self._index})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UTXO):
            return NotImplemented
        return self.key() == other.key()

    def __lt__(self, other: "UTXO") -> bool:
        if not isinstance(other, UTXO):
            return NotImplemented
        return self.key() < other.key()

    def __hash__(self) -> int:
        return hash(self.key())
