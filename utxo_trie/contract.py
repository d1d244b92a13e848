import json
import logging

from .hash import blake2b_224
from .identity import to_unit

logger = logging.getLogger(__name__)

NETWORK_IDS = {
    "mainnet": 1,
    "testnet": 0,
    "preprod": 0,
    "preview": 0,
}

PLUTUS_VERSIONS = {
    "v1": 1,
    "v2": 2,
    "v3": 3,
}

# Address header nibbles (CIP-19): script payment credential without stake part,
# and script stake credential for reward addresses.
_ENTERPRISE_SCRIPT_HEADER = 0x70
_REWARD_SCRIPT_HEADER = 0xF0


class TrieContract:
    def __init__(self, compiled_code, network_id=1, plutus_version=2, min_lovelace=2000000):
        """
        Deployed trie validator.

        The same script is the spending validator of every trie UTxO, the minting policy
        of the identity token and the stake validator whose zero withdrawal authorizes
        every transition. All addresses are derived from its hash.

        Parameters
        ----------
        compiled_code: bytes
            CBOR-wrapped flat script, as found in `compiledCode` of the blueprint.
        network_id: int
            1 for mainnet, 0 for test networks.
        plutus_version: int
            Plutus language version, used as the hashing namespace.
        min_lovelace: int
            Lovelace locked into every trie output.
        """
        if network_id not in (0, 1):
            raise ValueError("Network id must be 0 or 1, got {}".format(network_id))
        if plutus_version not in PLUTUS_VERSIONS.values():
            raise ValueError("Unsupported Plutus version {}".format(plutus_version))

        self.compiled_code = bytes(compiled_code)
        self.network_id = network_id
        self.plutus_version = plutus_version
        self.min_lovelace = min_lovelace

        self.script_hash = blake2b_224(bytes([plutus_version]) + self.compiled_code)

    def __repr__(self):
        return "<TrieContract: {}>".format(self.script_hash.hex())

    @property
    def policy_id(self):
        return self.script_hash

    @property
    def address(self):
        return bytes([_ENTERPRISE_SCRIPT_HEADER | self.network_id]) + self.script_hash

    @property
    def reward_address(self):
        return bytes([_REWARD_SCRIPT_HEADER | self.network_id]) + self.script_hash

    def unit(self, asset_name):
        return to_unit(self.policy_id, asset_name)

    @staticmethod
    def from_blueprint(path, title="trie.main", network_id=1, min_lovelace=2000000):
        """ Loads the validator named `title` from a CIP-57 blueprint (`plutus.json`). """
        with open(path) as f:
            blueprint = json.load(f)

        version = blueprint.get("preamble", {}).get("plutusVersion", "v2")
        if version not in PLUTUS_VERSIONS:
            raise ValueError("Unsupported Plutus version in blueprint: {}".format(version))

        for validator in blueprint.get("validators", []):
            if validator.get("title") == title:
                logger.debug("Loaded validator %s from %s", title, path)
                return TrieContract(bytes.fromhex(validator["compiledCode"]),
                                    network_id=network_id,
                                    plutus_version=PLUTUS_VERSIONS[version],
                                    min_lovelace=min_lovelace)

        raise KeyError("Validator {} not found in {}".format(title, path))

    @staticmethod
    def from_config(config):
        network_id = NETWORK_IDS[config["network"]]

        if config.get("compiled_code"):
            return TrieContract(bytes.fromhex(config["compiled_code"]),
                                network_id=network_id,
                                plutus_version=config["plutus_version"],
                                min_lovelace=config["min_lovelace"])

        if config.get("blueprint"):
            return TrieContract.from_blueprint(config["blueprint"],
                                               title=config["validator_title"],
                                               network_id=network_id,
                                               min_lovelace=config["min_lovelace"])

        raise ValueError("Configuration has neither compiled_code nor blueprint")
