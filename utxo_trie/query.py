import logging

from .datum import Datum

logger = logging.getLogger(__name__)


def lookup_exact(utxos, key):
    """
    Finds the UTxO holding the node with exactly this key.

    Parameters
    ----------
    utxos: iterable of UTxO
        Snapshot of the UTxOs carrying one trie's identity token.
    key: bytes
        Full key of the node.

    Returns
    -------
    UTxO
        The node's UTxO, or `None` if it isn't visible (yet).
    """
    for utxo in utxos:
        datum = Datum.decode(utxo.datum)
        if isinstance(datum, Datum.Node) and datum.key == key:
            return utxo

    logger.debug("No node with key %r in snapshot", key)
    return None


def lookup_origin(utxos):
    """ Finds the UTxO holding the trie's origin marker, or `None` if it isn't visible. """
    for utxo in utxos:
        if isinstance(Datum.decode(utxo.datum), Datum.Origin):
            return utxo

    logger.debug("No origin marker in snapshot")
    return None


def live_nodes(utxos):
    """ Decodes every node in the snapshot, sorted by key. """
    nodes = [datum for datum in map(lambda utxo: Datum.decode(utxo.datum), utxos) if isinstance(datum, Datum.Node)]
    return sorted(nodes, key=lambda node: node.key)
