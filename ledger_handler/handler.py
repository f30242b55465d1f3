"""
Implementation of the TxHandler class.

TxHandler owns a UTXOPool and decides which transactions may be committed
to it. is_valid_tx checks one transaction and applies it on success;
handle_txs resolves an unordered batch for one epoch, retrying rejected
transactions until the accepted set stops growing.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ledger_crypto.signature import verify_signature
from ledger_transaction.transaction import Transaction, TransactionOutput
from ledger_utxo.pool import PoolSnapshot, UTXOPool
from ledger_utxo.utxo import UTXO

logger = logging.getLogger(__name__)

SignatureVerifier = Callable[[bytes, bytes, Optional[bytes]], bool]


class ValidationContext:
    """
    Tentative pool changes made while one transaction is being checked.

    Attributes:
        spent_utxos (Dict[UTXO, TransactionOutput]): References already taken
            out of the pool, with the outputs to restore on rollback
        created_utxos (Dict[UTXO, TransactionOutput]): References to add on commit
        input_total (int): Sum of claimed output values
        output_total (int): Sum of created output values
    """

    def __init__(self):
        self.spent_utxos: Dict[UTXO, TransactionOutput] = {}
        self.created_utxos: Dict[UTXO, TransactionOutput] = {}
        self.input_total = 0
        self.output_total = 0

    def spend(self, pool: UTXOPool, utxo: UTXO, output: TransactionOutput) -> None:
        pool.remove_utxo(utxo)
        self.spent_utxos[utxo] = output
        self.input_total += output.value

    def create(self, utxo: UTXO, output: TransactionOutput) -> None:
        self.created_utxos[utxo] = output
        self.output_total += output.value

    def commit(self, pool: UTXOPool) -> None:
        # Spent references stay removed
        for utxo, output in self.created_utxos.items():
            pool.add_utxo(utxo, output)

    def rollback(self, pool: UTXOPool) -> None:
        for utxo, output in self.spent_utxos.items():
            pool.add_utxo(utxo, output)


class TxHandler:
    """
    Validates transactions against, and commits them to, a private UTXOPool.

    Attributes:
        utxo_pool (UTXOPool): The owned pool of spendable outputs
        verifier (SignatureVerifier): Signature check applied to every input
    """

    def __init__(self, utxo_pool: Optional[PoolSnapshot] = None, verifier: SignatureVerifier = verify_signature):
        """
        Create a handler whose ledger starts from a copy of utxo_pool.

        Args:
            utxo_pool: Initial snapshot of spendable outputs; copied, never aliased
            verifier: Callable (public_key, message, signature) -> bool
        """
        self._utxo_pool = UTXOPool(utxo_pool)
        self.verifier = verifier

    @property
    def utxo_pool(self) -> UTXOPool:
        return self._utxo_pool

    def is_valid_tx(self, tx: Transaction) -> bool:
        """
        Check tx against the current pool, committing it if valid.

        A transaction is valid if:
          (1) every output it claims is in the current pool,
          (2) the signature on each input is valid,
          (3) no output is claimed more than once,
          (4) every output value is positive, and
          (5) the sum of input values is at least the sum of output values.

        On success the claimed references are removed from the pool and the
        transaction's outputs are added. On failure the pool is left exactly
        as it was.

        Args:
            tx: Transaction to check

        Returns:
            bool: True if the transaction was valid and has been applied
        """
        valid, _ = self.check_tx(tx)
        return valid

    def check_tx(self, tx: Transaction) -> Tuple[bool, Optional[str]]:
        """
        Same as is_valid_tx, but also report why a transaction was rejected.

        Returns:
            Tuple of (is_valid: bool, error_message: Optional[str])
        """
        if tx.num_inputs() == 0:
            return self._reject(tx, "Transaction has no inputs", None)

        context = ValidationContext()
        try:
            error = self._apply(tx, context)
        except Exception:
            context.rollback(self._utxo_pool)
            raise

        if error is not None:
            return self._reject(tx, error, context)

        context.commit(self._utxo_pool)
        return True, None

    def _apply(self, tx: Transaction, context: ValidationContext) -> Optional[str]:
        """Run the input and output checks, recording tentative changes in context."""
        for index, tx_input in enumerate(tx.inputs):
            utxo = tx_input.to_utxo()

            # A reference claimed earlier in this transaction is already gone
            output = self._utxo_pool.get_output(utxo)
            if output is None:
                return f"Input {index} claims unavailable output {utxo!r}"

            if not self.verifier(output.address, tx.get_raw_data_to_sign(index), tx_input.signature):
                return f"Invalid signature on input {index}"

            context.spend(self._utxo_pool, utxo, output)

        if tx.outputs and tx.tx_hash is None:
            return "Transaction has no hash to reference its outputs by"

        for index, output in enumerate(tx.outputs):
            if output.value <= 0:
                return f"Output {index} value must be positive"
            context.create(UTXO(tx.tx_hash, index), output)

        if context.output_total > context.input_total:
            return f"Output value {context.output_total} exceeds input value {context.input_total}"

        return None

    def handle_txs(self, possible_txs: Iterable[Transaction]) -> List[Transaction]:
        """
        Accept a mutually valid subset of an unordered batch.

        Transactions are tried in the given order. Rejected ones are retried
        in further passes, since outputs created by later acceptances can make
        them valid. Resolution stops after the first pass that accepts nothing.
        Where transactions compete for the same output, the one tried first wins.

        Args:
            possible_txs: Candidate transactions for this epoch

        Returns:
            List of accepted transactions in the order they were accepted,
            which is a valid dependency order for chained spends
        """
        candidates = list(possible_txs)
        accepted, pending = self._resolve_pass(candidates)
        passes = 1

        while pending:
            newly_accepted, pending = self._resolve_pass(pending)
            passes += 1
            if not newly_accepted:
                break
            accepted.extend(newly_accepted)

        logger.info(
            "Resolved batch of %d transactions: %d accepted, %d rejected after %d passes",
            len(candidates), len(accepted), len(pending), passes
        )
        return accepted

    def _resolve_pass(self, txs: List[Transaction]) -> Tuple[List[Transaction], List[Transaction]]:
        """Try every transaction once; return (accepted, still_pending)."""
        accepted: List[Transaction] = []
        pending: List[Transaction] = []
        for tx in txs:
            if self.is_valid_tx(tx):
                accepted.append(tx)
            else:
                pending.append(tx)
        return accepted, pending

    def _reject(
        self,
        tx: Transaction,
        reason: str,
        context: Optional[ValidationContext]
    ) -> Tuple[bool, Optional[str]]:
        if context is not None:
            context.rollback(self._utxo_pool)
        logger.debug("Rejected %r: %s", tx, reason)
        return False, reason
