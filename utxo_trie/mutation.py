import logging

from .datum import Datum, Action, SPEND_REDEEMER, MINT_REDEEMER
from .exceptions import (
    InvalidChildKeyError,
    ConflictingChildError,
    NoConflictingChildError,
    AmbiguousChildError,
    DuplicateKeyError,
    UnsupportedSplitError,
)
from .identity import token_name
from .ledger import LOVELACE, Transaction

logger = logging.getLogger(__name__)


def _suffix(parent, child_key):
    """ Returns `child_key` without the parent's key, checking it's a strict extension of it. """
    if not child_key.startswith(parent.key):
        raise InvalidChildKeyError("Key {!r} doesn't start with parent key {!r}".format(child_key, parent.key))

    suffix = child_key[len(parent.key):]
    if len(suffix) == 0:
        raise DuplicateKeyError("Key {!r} is the parent's own key".format(child_key))

    return suffix


def colliding_children(parent, suffix):
    """ Children of `parent` that branch on the same first byte as `suffix`. """
    return [child for child in parent.children if child[:1] == suffix[:1]]


def plan_append(parent, child_key):
    """
    Computes the records produced by appending a leaf under `parent`.

    Parameters
    ----------
    parent: Datum.Node
        Current parent node.
    child_key: bytes
        Full key of the new leaf. Must extend the parent's key.

    Returns
    -------
    (Datum.Node, Datum.Node)
        The updated parent and the new leaf.

    Raises
    ------
    ConflictingChildError
        A child already branches on the same byte, `plan_between` must be used instead.
    """
    suffix = _suffix(parent, child_key)

    collisions = colliding_children(parent, suffix)
    if collisions:
        if suffix in collisions:
            raise DuplicateKeyError("Key {!r} already exists".format(child_key))
        raise ConflictingChildError("Child {!r} already branches on {!r}".format(collisions[0], suffix[:1]))

    new_parent = Datum.Node(parent.key, sorted(parent.children + [suffix]))
    leaf = Datum.Node(child_key, [])

    logger.debug("Planned append of %r onto %r", child_key, parent.key)
    return new_parent, leaf


def plan_between(parent, child_key):
    """
    Computes the records produced by inserting `child_key` between `parent` and one of its children.

    The child branching on the same first byte is rehoused under the new intermediate node;
    the child's own record isn't touched, only its suffix moves from the parent to the new node.

    Returns
    -------
    (Datum.Node, Datum.Node)
        The updated parent and the new intermediate node.

    Raises
    ------
    NoConflictingChildError
        No child branches on the first byte of the new suffix.
    AmbiguousChildError
        More than one child branches on it, which a well-formed node never has.
    UnsupportedSplitError
        The new key diverges inside the child's edge instead of being a prefix of it.
    """
    suffix = _suffix(parent, child_key)

    collisions = colliding_children(parent, suffix)
    if not collisions:
        raise NoConflictingChildError("Parent {!r} has no child conflicting with {!r}".format(parent.key, child_key))
    if len(collisions) > 1:
        raise AmbiguousChildError("Children {!r} all branch on {!r}".format(collisions, suffix[:1]))

    replacing = collisions[0]
    if replacing == suffix:
        raise DuplicateKeyError("Key {!r} already exists".format(child_key))

    # The new node must sit on the existing edge, i.e. be a proper prefix of the child's full key.
    rehoused_key = parent.key + replacing
    if not rehoused_key.startswith(child_key):
        raise UnsupportedSplitError("Key {!r} diverges inside edge {!r}".format(child_key, rehoused_key))

    children = [child for child in parent.children if child != replacing]
    new_parent = Datum.Node(parent.key, sorted(children + [suffix]))
    intermediate = Datum.Node(child_key, [rehoused_key[len(child_key):]])

    logger.debug("Planned split of %r between %r and %r", child_key, parent.key, rehoused_key)
    return new_parent, intermediate


def build_genesis(contract, seed):
    """
    Builds the genesis transaction of a new trie.

    Returns
    -------
    (Transaction, str)
        The transaction and the unit identifying the new trie.
    """
    reference = seed.reference()
    unit = contract.unit(token_name(reference))
    assets = {LOVELACE: contract.min_lovelace, unit: 1}

    tx = (Transaction()
          .collect_from([seed])
          .withdraw(contract.reward_address, 0, Action.Genesis(reference, 0))
          .mint_assets({unit: 2}, MINT_REDEEMER)
          .attach_script(contract)
          .pay_to_contract(contract.address, Datum.Node(b'', []), assets)
          .pay_to_contract(contract.address, Datum.Origin(b''), assets))

    return tx, unit


def _build_transition(contract, unit, parent_utxo, action, new_parent, new_node):
    assets = {LOVELACE: contract.min_lovelace, unit: 1}

    return (Transaction()
            .collect_from([parent_utxo], SPEND_REDEEMER)
            .withdraw(contract.reward_address, 0, action)
            .mint_assets({unit: 1}, MINT_REDEEMER)
            .attach_script(contract)
            .pay_to_contract(contract.address, new_parent, assets)
            .pay_to_contract(contract.address, new_node, assets))


def _parent_node(parent_utxo):
    parent = Datum.decode(parent_utxo.datum)
    if not isinstance(parent, Datum.Node):
        raise InvalidChildKeyError("UTxO {!r} holds {!r}, not a trie node".format(parent_utxo, parent))
    return parent


def build_append(contract, unit, parent_utxo, child_key):
    """ Builds the `Onto` transaction appending `child_key` as a leaf of the node held by `parent_utxo`. """
    new_parent, leaf = plan_append(_parent_node(parent_utxo), child_key)
    return _build_transition(contract, unit, parent_utxo, Action.Onto(0), new_parent, leaf)


def build_between(contract, unit, parent_utxo, child_key):
    """ Builds the `Between` transaction splitting an edge of the node held by `parent_utxo`. """
    new_parent, intermediate = plan_between(_parent_node(parent_utxo), child_key)
    return _build_transition(contract, unit, parent_utxo, Action.Between(0), new_parent, intermediate)
