import logging

import cbor2

from .exceptions import LedgerSubmissionError
from .hash import blake2b_256
from .ledger import LOVELACE, LedgerGateway, UTxO, Output, add_assets, subtract_assets

logger = logging.getLogger(__name__)


def _encode_datum(datum):
    if datum is None or isinstance(datum, bytes):
        return datum
    return datum.encode()


class Emulator(LedgerGateway):
    def __init__(self, accounts=None):
        """
        In-memory ledger.

        Submitted transactions wait in a mempool until `await_block` confirms them, so
        reads lag behind writes the same way they do on a real network. Only ledger rules
        are checked (inputs exist and are spent once, value is conserved, withdrawals hit
        registered reward accounts); the trie validator itself is not executed.

        Parameters
        ----------
        accounts: dict
            (Optional) Maps wallet address to the lovelace it starts with.
        """
        self._utxos = {}
        self._mempool = []
        self._pending_inputs = set()
        self._confirmed = set()
        self._reward_accounts = {}
        self._supply = {}
        self._wallet = None
        self.block_height = 0

        for address, lovelace in (accounts or {}).items():
            tx_hash = blake2b_256(cbor2.dumps([b"genesis", bytes(address), lovelace]))
            utxo = UTxO(tx_hash, 0, address, {LOVELACE: lovelace})
            self._utxos[utxo.reference()] = utxo

    def select_wallet(self, address):
        self._wallet = bytes(address)

    def register_reward_account(self, reward_address):
        self._reward_accounts.setdefault(bytes(reward_address), 0)

    def supply(self, unit):
        """ Confirmed circulating quantity of `unit`. """
        return self._supply.get(unit, 0)

    def wallet_utxos(self):
        if self._wallet is None:
            return []
        return [utxo for utxo in self._utxos.values() if utxo.address == self._wallet]

    def utxos_at_with_unit(self, address, unit):
        address = bytes(address)
        return [utxo for utxo in self._utxos.values()
                if utxo.address == address and utxo.assets.get(unit, 0) > 0]

    def _reject(self, reason):
        logger.warning("Transaction rejected: %s", reason)
        raise LedgerSubmissionError(reason)

    def _check_inputs(self, tx):
        seen = set()
        resolved = []
        for utxo, redeemer in tx.inputs:
            ref = utxo.reference()
            if ref in seen:
                self._reject("Input {!r} is spent twice".format(ref))
            seen.add(ref)

            if ref not in self._utxos:
                self._reject("Input {!r} is unknown or already spent".format(ref))
            if ref in self._pending_inputs:
                self._reject("Input {!r} is already spent by a pending transaction".format(ref))

            confirmed = self._utxos[ref]
            if confirmed.address != self._wallet and redeemer is None:
                self._reject("Script input {!r} has no redeemer".format(ref))

            resolved.append(confirmed)
        return resolved

    def _check_withdrawals(self, tx):
        for reward_address, amount, redeemer in tx.withdrawals:
            if reward_address not in self._reward_accounts:
                self._reject("Reward account {} is not registered".format(reward_address.hex()))
            if amount != self._reward_accounts[reward_address]:
                self._reject("Withdrawal must drain the reward account ({} requested, {} available)".format(
                    amount, self._reward_accounts[reward_address]))
            if redeemer is None:
                self._reject("Withdrawal from {} has no redeemer".format(reward_address.hex()))

    def _check_mint(self, tx):
        if not tx.mint:
            return
        if tx.mint_redeemer is None:
            self._reject("Minting without a redeemer")
        policies = {contract.policy_id.hex() for contract in tx.scripts}
        for unit in tx.mint:
            if unit[:56] not in policies:
                self._reject("No script attached for policy {}".format(unit[:56]))

    def _balance(self, tx, resolved):
        """ Adds wallet inputs until value is conserved and returns (extra inputs, change). """
        produced = add_assets(*[out.assets for out in tx.outputs])
        available = add_assets(*[utxo.assets for utxo in resolved], tx.mint)
        leftover = subtract_assets(available, produced)

        extra = []
        spent = {utxo.reference() for utxo in resolved}
        for utxo in self.wallet_utxos():
            if all(quantity >= 0 for quantity in leftover.values()):
                break
            ref = utxo.reference()
            if ref in spent or ref in self._pending_inputs:
                continue
            extra.append(utxo)
            leftover = add_assets(leftover, utxo.assets)

        missing = {unit: -quantity for unit, quantity in leftover.items() if quantity < 0}
        if missing:
            self._reject("Insufficient funds, missing {!r}".format(missing))

        return extra, leftover

    def submit(self, tx):
        if self._wallet is None:
            self._reject("No wallet selected")

        resolved = self._check_inputs(tx)
        self._check_withdrawals(tx)
        self._check_mint(tx)
        extra, change = self._balance(tx, resolved)

        inputs = resolved + extra
        outputs = list(tx.outputs)
        if change:
            outputs.append(Output(self._wallet, change))

        body = [
            [[utxo.tx_hash, utxo.output_index] for utxo in inputs],
            [[out.address, sorted(out.assets.items()), _encode_datum(out.datum)] for out in outputs],
            sorted(tx.mint.items()),
        ]
        tx_hash = blake2b_256(cbor2.dumps(body))

        created = [UTxO(tx_hash, i, out.address, out.assets, _encode_datum(out.datum))
                   for i, out in enumerate(outputs)]
        consumed = [utxo.reference() for utxo in inputs]

        self._mempool.append((tx_hash, consumed, created, dict(tx.mint)))
        self._pending_inputs.update(consumed)

        logger.info("Submitted transaction %s (%d inputs, %d outputs)", tx_hash.hex(), len(consumed), len(created))
        return tx_hash.hex()

    def await_block(self, height=1):
        """ Confirms every pending transaction and moves the chain forward. """
        for tx_hash, consumed, created, mint in self._mempool:
            for ref in consumed:
                del self._utxos[ref]
            for utxo in created:
                self._utxos[utxo.reference()] = utxo
            self._supply = add_assets(self._supply, mint)
            self._confirmed.add(tx_hash.hex())

        self._mempool = []
        self._pending_inputs = set()
        self.block_height += height

    def await_tx(self, tx_hash):
        if any(pending[0].hex() == tx_hash for pending in self._mempool):
            self.await_block()
        return tx_hash in self._confirmed
