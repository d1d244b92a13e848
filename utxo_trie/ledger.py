from abc import ABC, abstractmethod

from .datum import OutputReference

LOVELACE = "lovelace"


def add_assets(*asset_maps):
    """ Sums asset maps, dropping zero entries. """
    total = {}
    for assets in asset_maps:
        for unit, quantity in assets.items():
            total[unit] = total.get(unit, 0) + quantity
    return {unit: quantity for unit, quantity in total.items() if quantity != 0}


def subtract_assets(a, b):
    return add_assets(a, {unit: -quantity for unit, quantity in b.items()})


class UTxO:
    """ Unspent transaction output as seen through the ledger gateway. """

    def __init__(self, tx_hash, output_index, address, assets, datum=None):
        self.tx_hash = bytes(tx_hash)
        self.output_index = output_index
        self.address = bytes(address)
        self.assets = dict(assets)
        # Inline datum, CBOR-encoded.
        self.datum = datum

    def __eq__(self, other):
        if not isinstance(other, UTxO):
            return NotImplemented
        return self.reference() == other.reference()

    def __hash__(self):
        return hash(self.reference())

    def __repr__(self):
        return "<UTxO: {}#{}>".format(self.tx_hash.hex(), self.output_index)

    def reference(self):
        return OutputReference(self.tx_hash, self.output_index)


class Output:
    def __init__(self, address, assets, datum=None):
        self.address = bytes(address)
        self.assets = dict(assets)
        self.datum = datum

    def __repr__(self):
        return "<Output: {} {!r}>".format(self.address.hex(), self.assets)


class Transaction:
    """
    Description of a transaction, built fluently before it's handed to the gateway.

    Redeemers and datums are kept as the objects from `datum`, so the gateway decides
    how to serialize them. Balancing, fees and signing are left to the gateway.
    """

    def __init__(self):
        # List of (UTxO, spend redeemer or None for wallet inputs).
        self.inputs = []
        # List of (reward address, amount, redeemer).
        self.withdrawals = []
        self.mint = {}
        self.mint_redeemer = None
        self.outputs = []
        self.scripts = []

    def __repr__(self):
        return "<Transaction: {} inputs, {} outputs, mint {!r}>".format(len(self.inputs), len(self.outputs), self.mint)

    def collect_from(self, utxos, redeemer=None):
        for utxo in utxos:
            self.inputs.append((utxo, redeemer))
        return self

    def withdraw(self, reward_address, amount, redeemer):
        self.withdrawals.append((bytes(reward_address), amount, redeemer))
        return self

    def mint_assets(self, assets, redeemer):
        self.mint = add_assets(self.mint, assets)
        self.mint_redeemer = redeemer
        return self

    def pay_to_contract(self, address, datum, assets):
        self.outputs.append(Output(address, assets, datum))
        return self

    def attach_script(self, contract):
        if contract not in self.scripts:
            self.scripts.append(contract)
        return self


class LedgerGateway(ABC):
    """
    Everything the trie needs from a ledger: reading UTxOs, submitting transactions
    and waiting for them to be confirmed.
    """

    @abstractmethod
    def wallet_utxos(self):
        """ UTxOs spendable by the selected wallet. """

    @abstractmethod
    def utxos_at_with_unit(self, address, unit):
        """ UTxOs at `address` holding at least one `unit`. """

    @abstractmethod
    def submit(self, tx):
        """
        Balances, signs and submits `tx`.

        Returns the transaction hash. Raises `LedgerSubmissionError` if the ledger refuses it.
        """

    @abstractmethod
    def await_tx(self, tx_hash):
        """ Waits for `tx_hash` to be confirmed, returns whether it was. """
