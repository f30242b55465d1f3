"""
Implementation of the UTXOPool class.

The pool is the in-memory registry of every output that is currently
spendable, keyed by its UTXO spend reference.
"""

from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .utxo import UTXO

if TYPE_CHECKING:
    from ledger_transaction.transaction import TransactionOutput

PoolSnapshot = Union[
    "UTXOPool",
    Mapping[UTXO, "TransactionOutput"],
    Iterable[Tuple[UTXO, "TransactionOutput"]],
]


class UTXOPool:
    """
    Mutable mapping from UTXO references to the outputs they name.

    The pool does no validation of its own: callers are responsible for never
    reusing a live reference. It has a single owner and no locking.

    Attributes:
        _utxos (Dict[UTXO, TransactionOutput]): Spendable outputs by reference
    """

    def __init__(self, snapshot: Optional[PoolSnapshot] = None):
        """
        Create a pool, optionally seeded from a snapshot.

        The snapshot is always copied so the caller can keep mutating it
        independently afterwards.

        Args:
            snapshot: Another UTXOPool, a mapping of UTXO to output, or an
                iterable of (UTXO, output) pairs
        """
        self._utxos: Dict[UTXO, "TransactionOutput"] = {}
        if snapshot is None:
            return

        if isinstance(snapshot, UTXOPool):
            entries: Iterable[Tuple[UTXO, "TransactionOutput"]] = snapshot.all_entries()
        elif isinstance(snapshot, Mapping):
            entries = snapshot.items()
        else:
            entries = snapshot

        for utxo, output in entries:
            self.add_utxo(utxo, output)

    def add_utxo(self, utxo: UTXO, output: "TransactionOutput") -> None:
        """
        Insert a mapping from utxo to output, overwriting any existing entry.

        Args:
            utxo: Spend reference
            output: Output the reference points at
        """
        self._utxos[utxo] = output

    def remove_utxo(self, utxo: UTXO) -> None:
        """Remove utxo from the pool. Removing an absent reference does nothing."""
        self._utxos.pop(utxo, None)

    def get_output(self, utxo: UTXO) -> Optional["TransactionOutput"]:
        """
        Look up the output a reference points at.

        Args:
            utxo: Spend reference

        Returns:
            TransactionOutput if the reference is unspent, None otherwise
        """
        return self._utxos.get(utxo)

    def contains(self, utxo: UTXO) -> bool:
        return utxo in self._utxos

    def all_utxos(self) -> List[UTXO]:
        return list(self._utxos.keys())

    def all_entries(self) -> List[Tuple[UTXO, "TransactionOutput"]]:
        """
        Get every (reference, output) pair currently in the pool.

        Returns:
            Unordered list of pairs; mutating it does not affect the pool
        """
        return list(self._utxos.items())

    def get_total_value(self) -> int:
        """
        Sum the values of every spendable output.

        Returns:
            int: Total value in minor units
        """
        return sum(output.value for output in self._utxos.values())

    def copy(self) -> "UTXOPool":
        """Copy the entries; outputs are immutable and shared with the copy."""
        return UTXOPool(self)

    def __contains__(self, utxo: object) -> bool:
        return utxo in self._utxos

    def __len__(self) -> int:
        return len(self._utxos)

    def __repr__(self) -> str:
        return f"UTXOPool(size={len(self._utxos)})"
