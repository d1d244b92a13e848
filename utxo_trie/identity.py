from .datum import OutputReference
from .hash import blake2b_256


def token_name(output_reference):
    """
    Derives the asset name identifying one trie instance.

    The name is blake2b-256 of the CBOR encoding of the seed's output reference,
    exactly as the validator computes it at genesis.

    Parameters
    ----------
    output_reference: OutputReference
        Reference of the UTxO consumed at genesis.

    Returns
    -------
    bytes
        32-byte asset name.
    """
    if not isinstance(output_reference, OutputReference):
        raise TypeError("Expected OutputReference, got {!r}".format(output_reference))

    return blake2b_256(output_reference.encode())


def to_unit(policy_id, asset_name):
    """ Joins policy id and asset name into the hex unit string used in asset maps. """
    if len(policy_id) != 28:
        raise ValueError("Policy id must be 28 bytes, got {}".format(len(policy_id)))
    if len(asset_name) > 32:
        raise ValueError("Asset name must be at most 32 bytes, got {}".format(len(asset_name)))

    return (bytes(policy_id) + bytes(asset_name)).hex()


def from_unit(unit):
    """ Splits a unit string back into (policy_id, asset_name). """
    raw = bytes.fromhex(unit)
    if len(raw) < 28:
        raise ValueError("Unit is too short: {}".format(unit))
    return raw[:28], raw[28:]
