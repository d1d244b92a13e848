import unittest
import contextlib
import io
import json
import os
import tempfile
from utxo_trie.cli import main
from utxo_trie.config import DEFAULT_CONFIG, load_config, validate_config
from utxo_trie.datum import Datum, OutputReference
from utxo_trie.identity import token_name

COMPILED_CODE = '4e4d01000033222220051200120011'


class TestConfig(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, 'config.json')

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, content):
        with open(self.path, 'w') as f:
            f.write(content)

    def test_defaults_when_missing(self):
        config = load_config(self.path)
        self.assertEqual(config, DEFAULT_CONFIG)
        validate_config(config)

    def test_merges_over_defaults(self):
        self.write(json.dumps({"network": "preview", "compiled_code": COMPILED_CODE}))
        config = load_config(self.path)

        self.assertEqual(config["network"], "preview")
        self.assertEqual(config["compiled_code"], COMPILED_CODE)
        self.assertEqual(config["min_lovelace"], DEFAULT_CONFIG["min_lovelace"])
        validate_config(config)

    def test_broken_file(self):
        self.write('{"network": ')
        with self.assertRaises(RuntimeError):
            load_config(self.path)

    def test_validation(self):
        invalid = [
            {"network": "moon"},
            {"plutus_version": 4},
            {"compiled_code": "xyz"},
            {"blueprint": 5},
            {"min_lovelace": 0},
            {"min_lovelace": True},
            {"log_level": "LOUD"},
        ]
        for change in invalid:
            config = DEFAULT_CONFIG.copy()
            config.update(change)
            with self.subTest(change):
                with self.assertRaises(ValueError):
                    validate_config(config)


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, 'config.json')
        with open(self.path, 'w') as f:
            json.dump({"compiled_code": COMPILED_CODE, "log_level": "ERROR"}, f)

    def tearDown(self):
        self.tmp.cleanup()

    def run_cli(self, *args):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main(['--config', self.path] + list(args))
        return out.getvalue().strip()

    def test_token_name(self):
        tx_hash = 'ab' * 32
        expected = token_name(OutputReference(bytes.fromhex(tx_hash), 3)).hex()
        self.assertEqual(self.run_cli('token-name', tx_hash, '3'), expected)

    def test_encode_and_decode(self):
        encoded = self.run_cli('encode-node', 'hello', '_world')
        self.assertEqual(Datum.decode(bytes.fromhex(encoded)), Datum.Node(b'hello', [b'_world']))

        self.assertEqual(self.run_cli('decode', encoded), repr(Datum.Node(b'hello', [b'_world'])))
        self.assertEqual(self.run_cli('decode', 'd87b9f00ff'), '<Between: oidx=0>')

    def test_script_info(self):
        output = self.run_cli('script-info')
        self.assertIn('reward address', output)

    def test_errors_exit(self):
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            with self.assertRaises(SystemExit) as cm:
                self.run_cli('decode', 'f5')
        self.assertEqual(cm.exception.code, 1)
