# -*- coding: utf-8 -*-
"""
    utxo_trie
    ~~~~~
    Insert-only trie stored as individually spendable UTxOs.

    :copyright: © 2019 by Igor Aleksanov.

    :license: MIT, see LICENSE for more details.
"""

__version__ = '0.1.0'


from .contract import TrieContract
from .datum import Datum, Action, OutputReference
from .trie import UtxoTrie

name = "utxo_trie"
