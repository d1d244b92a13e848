import unittest
from utxo_trie import TrieContract, UtxoTrie
from utxo_trie.datum import Datum
from utxo_trie.emulator import Emulator
from utxo_trie.exceptions import (
    LedgerSubmissionError,
    DuplicateKeyError,
    ConflictingChildError,
    NodeNotFoundError,
)
from utxo_trie.identity import token_name
from utxo_trie.ledger import LOVELACE, Transaction

COMPILED_CODE = bytes.fromhex('4e4d01000033222220051200120011')
WALLET = b'\x60' + bytes(range(28))


def new_ledger(contract, lovelace=100000000000):
    emulator = LaggingEmulator({WALLET: lovelace})
    emulator.select_wallet(WALLET)
    emulator.register_reward_account(contract.reward_address)
    return emulator


class LaggingEmulator(Emulator):
    """ Emulator whose reads miss one node, as a lagging indexer would. """
    hidden_key = None

    def utxos_at_with_unit(self, address, unit):
        utxos = super().utxos_at_with_unit(address, unit)
        if self.hidden_key is None:
            return utxos
        return [utxo for utxo in utxos if getattr(Datum.decode(utxo.datum), "key", None) != self.hidden_key]


class TestGenesis(unittest.TestCase):
    def setUp(self):
        self.contract = TrieContract(COMPILED_CODE, network_id=0)
        self.emulator = new_ledger(self.contract)

    def test_genesis(self):
        seed = self.emulator.wallet_utxos()[0]
        trie, tx_hash = UtxoTrie.create(self.emulator, self.contract)

        self.assertTrue(self.emulator.await_tx(tx_hash))
        self.assertEqual(trie.unit(), self.contract.unit(token_name(seed.reference())))

        root = trie.get('')
        origin = trie.origin()
        self.assertEqual(Datum.decode(root.datum), Datum.Node(b'', []))
        self.assertEqual(Datum.decode(origin.datum), Datum.Origin(b''))
        self.assertEqual(root.assets[trie.unit()], 1)
        self.assertEqual(origin.assets[trie.unit()], 1)
        self.assertEqual(self.emulator.supply(trie.unit()), 2)

        # The seed is gone for good.
        self.assertNotIn(seed, self.emulator.wallet_utxos())

    def test_genesis_is_not_visible_before_confirmation(self):
        trie, _ = UtxoTrie.create(self.emulator, self.contract)

        self.assertIsNone(trie.get(''))
        self.assertIsNone(trie.origin())

    def test_two_tries_have_different_units(self):
        first, tx_hash = UtxoTrie.create(self.emulator, self.contract)
        self.emulator.await_tx(tx_hash)
        second, tx_hash = UtxoTrie.create(self.emulator, self.contract)
        self.emulator.await_tx(tx_hash)

        self.assertNotEqual(first.unit(), second.unit())
        self.assertEqual(len(first.nodes()), 1)
        self.assertEqual(len(second.nodes()), 1)

    def test_genesis_without_reward_account(self):
        emulator = Emulator({WALLET: 100000000})
        emulator.select_wallet(WALLET)

        with self.assertRaises(LedgerSubmissionError):
            UtxoTrie.create(emulator, self.contract)

    def test_genesis_with_empty_wallet(self):
        emulator = Emulator()
        emulator.select_wallet(WALLET)

        with self.assertRaises(LedgerSubmissionError):
            UtxoTrie.create(emulator, self.contract)

    def test_genesis_with_insufficient_funds(self):
        emulator = new_ledger(self.contract, lovelace=1000000)

        with self.assertRaises(LedgerSubmissionError):
            UtxoTrie.create(emulator, self.contract)


class TestMutations(unittest.TestCase):
    def setUp(self):
        self.contract = TrieContract(COMPILED_CODE, network_id=0)
        self.emulator = new_ledger(self.contract)
        self.trie, tx_hash = UtxoTrie.create(self.emulator, self.contract)
        self.emulator.await_tx(tx_hash)

    def node(self, key):
        utxo = self.trie.get(key)
        return Datum.decode(utxo.datum) if utxo is not None else None

    def confirm(self, tx_hash):
        self.assertTrue(self.emulator.await_tx(tx_hash))

    def test_append_and_between(self):
        self.confirm(self.trie.append(self.trie.get(''), 'hello_world'))

        self.assertEqual(self.node(''), Datum.Node(b'', [b'hello_world']))
        self.assertEqual(self.node('hello_world'), Datum.Node(b'hello_world', []))
        leaf = self.trie.get('hello_world')

        self.confirm(self.trie.between(self.trie.get(''), 'hello'))

        self.assertEqual(self.node(''), Datum.Node(b'', [b'hello']))
        self.assertEqual(self.node('hello'), Datum.Node(b'hello', [b'_world']))
        # The rehoused child keeps its UTxO.
        self.assertEqual(self.trie.get('hello_world'), leaf)
        self.assertEqual(self.emulator.supply(self.trie.unit()), 4)

    def test_duplicate_insertion_fails(self):
        self.confirm(self.trie.insert('hello_world'))
        self.confirm(self.trie.insert('hello'))

        nodes = self.trie.nodes()

        with self.assertRaises(DuplicateKeyError):
            self.trie.insert('hello_world')
        with self.assertRaises(DuplicateKeyError):
            self.trie.insert('hello')
        with self.assertRaises(DuplicateKeyError):
            self.trie.between(self.trie.get(''), 'hello')
        with self.assertRaises(DuplicateKeyError):
            self.trie.between(self.trie.get('hello'), 'hello_world')
        with self.assertRaises(ConflictingChildError):
            self.trie.append(self.trie.get(''), 'hello_world')

        self.emulator.await_block()
        self.assertEqual(self.trie.nodes(), nodes)
        self.assertEqual(self.emulator.supply(self.trie.unit()), 4)

    def test_losing_writer_is_rejected(self):
        root = self.trie.get('')
        self.trie.append(root, 'a')

        with self.assertRaises(LedgerSubmissionError):
            self.trie.append(root, 'b')

        self.emulator.await_block()

        # A stale parent stays stale after confirmation.
        with self.assertRaises(LedgerSubmissionError):
            self.trie.append(root, 'b')

        self.confirm(self.trie.insert('b'))
        self.assertEqual(self.node(''), Datum.Node(b'', [b'a', b'b']))

    def test_read_lag(self):
        self.trie.append(self.trie.get(''), 'a')

        self.assertIsNone(self.trie.get('a'))
        self.assertEqual(self.node(''), Datum.Node(b'', []))

        self.emulator.await_block()
        self.assertEqual(self.node('a'), Datum.Node(b'a', []))

    def test_insert_with_missing_node(self):
        self.confirm(self.trie.insert('a'))
        self.emulator.hidden_key = b'a'

        with self.assertRaises(NodeNotFoundError):
            self.trie.insert('ab')

    def test_submission_to_another_ledger(self):
        emulator = Emulator()
        emulator.select_wallet(WALLET)
        emulator.register_reward_account(self.contract.reward_address)

        with self.assertRaises(LedgerSubmissionError):
            emulator.submit(Transaction().collect_from([self.trie.get('')]))

    def test_token_supply_and_structure(self):
        keys = ['hello_world', 'hello', 'hello_w', 'goodbye', 'good', 'hello_world_again', 'apple', 'hello!']

        for n, key in enumerate(keys, start=1):
            self.confirm(self.trie.insert(key))

            nodes = self.trie.nodes()
            self.assertEqual(self.emulator.supply(self.trie.unit()), n + 2)
            self.assertEqual(len(nodes), n + 1)

            by_key = {node.key: node for node in nodes}
            self.assertEqual(len(by_key), len(nodes))
            for node in nodes:
                self.assertEqual(node.children, sorted(set(node.children)))
                for child in node.children:
                    self.assertIn(node.key + child, by_key)

        self.assertEqual(sorted(by_key), sorted([b''] + [key.encode() for key in keys]))
        self.assertEqual(self.node(''), Datum.Node(b'', [b'apple', b'good', b'hello']))
        self.assertEqual(self.node('hello'), Datum.Node(b'hello', [b'!', b'_w']))
        self.assertEqual(self.node('hello_w'), Datum.Node(b'hello_w', [b'orld']))
        self.assertEqual(self.node('hello_world'), Datum.Node(b'hello_world', [b'_again']))

        # Every live trie output carries exactly one token.
        for utxo in self.emulator.utxos_at_with_unit(self.contract.address, self.trie.unit()):
            self.assertEqual(utxo.assets[self.trie.unit()], 1)
            self.assertEqual(utxo.assets[LOVELACE], self.contract.min_lovelace)
