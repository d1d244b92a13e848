from .exceptions import InvalidDatumError
from .plutus import Constr, VOID, to_cbor, from_cbor

# Spending a trie UTxO proves nothing on its own: the spend redeemer is the
# validator's wrapped placeholder and the real checks run in the withdrawal.
SPEND_REDEEMER = Constr(1, [VOID])
MINT_REDEEMER = VOID


def _expect_constr(data, index, arity, what):
    if not isinstance(data, Constr) or data.index != index or len(data.fields) != arity:
        raise InvalidDatumError("Expected {} (constructor {} with {} fields), got {!r}".format(what, index, arity, data))
    return data.fields


def _expect_bytes(value, what):
    if not isinstance(value, bytes):
        raise InvalidDatumError("{} must be bytes, got {!r}".format(what, value))
    return value


def _expect_int(value, what):
    if type(value) is not int or value < 0:
        raise InvalidDatumError("{} must be a non-negative integer, got {!r}".format(what, value))
    return value


class OutputReference:
    """ Reference to a transaction output: transaction hash plus output index. """

    def __init__(self, tx_hash, output_index):
        if len(tx_hash) != 32:
            raise ValueError("Transaction hash must be 32 bytes, got {}".format(len(tx_hash)))
        if output_index < 0:
            raise ValueError("Output index must be non-negative, got {}".format(output_index))
        self.tx_hash = bytes(tx_hash)
        self.output_index = output_index

    def __eq__(self, other):
        if not isinstance(other, OutputReference):
            return NotImplemented
        return self.tx_hash == other.tx_hash and self.output_index == other.output_index

    def __hash__(self):
        return hash((self.tx_hash, self.output_index))

    def __repr__(self):
        return "<OutputReference: {}#{}>".format(self.tx_hash.hex(), self.output_index)

    def to_plutus(self):
        return Constr(0, [Constr(0, [self.tx_hash]), self.output_index])

    def encode(self):
        return to_cbor(self.to_plutus())

    @staticmethod
    def from_plutus(data):
        tx_id, output_index = _expect_constr(data, 0, 2, "OutputReference")
        tx_hash, = _expect_constr(tx_id, 0, 1, "TransactionId")
        tx_hash = _expect_bytes(tx_hash, "Transaction hash")
        if len(tx_hash) != 32:
            raise InvalidDatumError("Transaction hash must be 32 bytes, got {}".format(len(tx_hash)))
        return OutputReference(tx_hash, _expect_int(output_index, "Output index"))


class Datum:
    """ Payload of a trie UTxO: either a trie node or the origin marker. """

    class Node:
        def __init__(self, key, children=None):
            self.key = _expect_bytes(key, "Node key")
            self.children = [_expect_bytes(c, "Node child") for c in children] if children else []

            # Children are a set kept in ascending byte order.
            for a, b in zip(self.children, self.children[1:]):
                if not a < b:
                    raise InvalidDatumError("Node children aren't strictly ascending: {!r}".format(self.children))

        def __eq__(self, other):
            if not isinstance(other, Datum.Node):
                return NotImplemented
            return self.key == other.key and self.children == other.children

        def __repr__(self):
            return "<Node: key={!r}, children={!r}>".format(self.key, self.children)

        def to_plutus(self):
            return Constr(0, [self.key, list(self.children)])

        def encode(self):
            return to_cbor(self.to_plutus())

    class Origin:
        def __init__(self, required_withdrawal=b''):
            self.required_withdrawal = _expect_bytes(required_withdrawal, "Required withdrawal")

        def __eq__(self, other):
            if not isinstance(other, Datum.Origin):
                return NotImplemented
            return self.required_withdrawal == other.required_withdrawal

        def __repr__(self):
            return "<Origin: required_withdrawal={!r}>".format(self.required_withdrawal)

        def to_plutus(self):
            return Constr(1, [self.required_withdrawal])

        def encode(self):
            return to_cbor(self.to_plutus())

    @staticmethod
    def from_plutus(data):
        if isinstance(data, Constr) and data.index == 0:
            key, children = _expect_constr(data, 0, 2, "Node")
            if not isinstance(children, list):
                raise InvalidDatumError("Node children must be a list, got {!r}".format(children))
            return Datum.Node(key, children)

        if isinstance(data, Constr) and data.index == 1:
            required_withdrawal, = _expect_constr(data, 1, 1, "Origin")
            return Datum.Origin(required_withdrawal)

        raise InvalidDatumError("Unknown trie datum: {!r}".format(data))

    @staticmethod
    def decode(encoded_data):
        """ Decodes a trie datum from CBOR. """
        return Datum.from_plutus(from_cbor(encoded_data))


class Action:
    """ Redeemer of the trie's withdrawal: says which transition the transaction performs. """

    class Genesis:
        def __init__(self, output_reference, output_index=0):
            self.output_reference = output_reference
            self.output_index = output_index

        def __eq__(self, other):
            if not isinstance(other, Action.Genesis):
                return NotImplemented
            return self.output_reference == other.output_reference and self.output_index == other.output_index

        def __repr__(self):
            return "<Genesis: {!r}, oidx={}>".format(self.output_reference, self.output_index)

        def to_plutus(self):
            return Constr(0, [self.output_reference.to_plutus(), self.output_index])

        def encode(self):
            return to_cbor(self.to_plutus())

    class _Transition:
        INDEX = None

        def __init__(self, output_index=0):
            self.output_index = output_index

        def __eq__(self, other):
            if type(other) is not type(self):
                return NotImplemented
            return self.output_index == other.output_index

        def __repr__(self):
            return "<{}: oidx={}>".format(type(self).__name__, self.output_index)

        def to_plutus(self):
            return Constr(self.INDEX, [self.output_index])

        def encode(self):
            return to_cbor(self.to_plutus())

    class Onto(_Transition):
        INDEX = 1

    class Between(_Transition):
        INDEX = 2

    @staticmethod
    def from_plutus(data):
        if isinstance(data, Constr) and data.index == 0:
            output_reference, output_index = _expect_constr(data, 0, 2, "Genesis")
            return Action.Genesis(OutputReference.from_plutus(output_reference),
                                  _expect_int(output_index, "Output index"))

        if isinstance(data, Constr) and data.index in (Action.Onto.INDEX, Action.Between.INDEX):
            variant = Action.Onto if data.index == Action.Onto.INDEX else Action.Between
            output_index, = _expect_constr(data, data.index, 1, variant.__name__)
            return variant(_expect_int(output_index, "Output index"))

        raise InvalidDatumError("Unknown trie action: {!r}".format(data))

    @staticmethod
    def decode(encoded_data):
        """ Decodes a trie action from CBOR. """
        return Action.from_plutus(from_cbor(encoded_data))
