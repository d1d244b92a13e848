import logging

from .datum import Datum
from .exceptions import LedgerSubmissionError, DuplicateKeyError, NodeNotFoundError
from .mutation import build_genesis, build_append, build_between, colliding_children
from .query import lookup_exact, lookup_origin, live_nodes

logger = logging.getLogger(__name__)


def _to_key(key):
    if isinstance(key, str):
        return key.encode('utf-8')
    return bytes(key)


class UtxoTrie:
    def __init__(self, gateway, contract, unit):
        """
        Handle to one trie instance living on the ledger.

        UtxoTrie keeps no state besides the identity of the trie: every call reads the
        gateway's current view and builds transactions from it. If a transaction loses
        the race for its parent UTxO, the gateway rejects it and the caller can simply
        call the operation again.

        Parameters
        ----------
        gateway: LedgerGateway
            Ledger access used for reads and submissions.
        contract: TrieContract
            Deployed trie validator.
        unit: str
            Identity token of the trie (policy id followed by asset name, hex).

        Returns
        -------
        UtxoTrie
            An instance bound to one trie.
        """
        self._gateway = gateway
        self._contract = contract
        self._unit = unit

    def __repr__(self):
        return "<UtxoTrie: {}>".format(self._unit)

    @classmethod
    def create(cls, gateway, contract):
        """
        Creates a new trie, consuming the wallet's first UTxO as the seed.

        Returns
        -------
        (UtxoTrie, str)
            The new trie and the hash of the genesis transaction.

        Raises
        ------
        LedgerSubmissionError
            The wallet is empty or the ledger refused the transaction.
        """
        utxos = gateway.wallet_utxos()
        if not utxos:
            raise LedgerSubmissionError("Wallet has no UTxO to use as a seed")

        tx, unit = build_genesis(contract, utxos[0])
        tx_hash = gateway.submit(tx)

        logger.info("Created trie %s in %s", unit, tx_hash)
        return cls(gateway, contract, unit), tx_hash

    def unit(self):
        return self._unit

    def _snapshot(self):
        return self._gateway.utxos_at_with_unit(self._contract.address, self._unit)

    def get(self, key):
        """ Returns the UTxO holding the node with this exact key, or `None` if it isn't visible. """
        return lookup_exact(self._snapshot(), _to_key(key))

    def origin(self):
        """ Returns the UTxO holding the origin marker, or `None` if it isn't visible. """
        return lookup_origin(self._snapshot())

    def nodes(self):
        return live_nodes(self._snapshot())

    def append(self, parent, key):
        """ Appends `key` as a new leaf under the node held by `parent`. Returns the transaction hash. """
        tx = build_append(self._contract, self._unit, parent, _to_key(key))
        return self._submit(tx, "append", key)

    def between(self, parent, key):
        """ Inserts `key` between the node held by `parent` and the child it collides with. """
        tx = build_between(self._contract, self._unit, parent, _to_key(key))
        return self._submit(tx, "between", key)

    def insert(self, key):
        """
        Inserts `key`, finding the parent and the kind of transition on its own.

        The trie is walked from the root with exact lookups, following the child that
        branches on the next byte of the key, until a node is found where the key either
        starts a new branch (append) or ends inside an existing edge (between).

        Raises
        ------
        DuplicateKeyError
            The key is already in the trie.
        NodeNotFoundError
            A node on the path isn't visible yet.
        """
        key = _to_key(key)
        snapshot = self._snapshot()

        node_key = b''
        while True:
            utxo = lookup_exact(snapshot, node_key)
            if utxo is None:
                raise NodeNotFoundError(node_key)

            node = Datum.decode(utxo.datum)
            suffix = key[len(node.key):]
            if len(suffix) == 0:
                raise DuplicateKeyError("Key {!r} already exists".format(key))

            collisions = colliding_children(node, suffix)
            if not collisions:
                return self.append(utxo, key)

            if len(collisions) == 1 and suffix.startswith(collisions[0]):
                node_key = node.key + collisions[0]
                continue

            # Ambiguous or diverging edges are reported by the planner.
            return self.between(utxo, key)

    def _submit(self, tx, operation, key):
        try:
            tx_hash = self._gateway.submit(tx)
        except LedgerSubmissionError:
            logger.warning("Ledger refused %s of %r into %s", operation, key, self._unit)
            raise

        logger.info("Submitted %s of %r into %s: %s", operation, key, self._unit, tx_hash)
        return tx_hash
