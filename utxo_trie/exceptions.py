class TrieError(Exception):
    """ Base class for all errors raised by this package. """


class InvalidDatumError(TrieError, ValueError):
    """ Raised when CBOR can't be decoded into the expected record or action. """


class PreconditionError(TrieError, ValueError):
    """ Raised before building a transaction when the requested mutation can't be valid. """


class InvalidChildKeyError(PreconditionError):
    pass


class ConflictingChildError(PreconditionError):
    pass


class NoConflictingChildError(PreconditionError):
    pass


class AmbiguousChildError(PreconditionError):
    pass


class DuplicateKeyError(PreconditionError):
    pass


class UnsupportedSplitError(PreconditionError):
    pass


class NodeNotFoundError(TrieError, KeyError):
    pass


class LedgerSubmissionError(TrieError):
    """ The ledger refused a transaction. The reason is reported as-is and never classified. """
