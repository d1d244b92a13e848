from Crypto.Hash import BLAKE2b


def blake2b_256(data):
    blake2b_hash = BLAKE2b.new(digest_bits=256)
    blake2b_hash.update(data)
    return blake2b_hash.digest()


def blake2b_224(data):
    blake2b_hash = BLAKE2b.new(digest_bits=224)
    blake2b_hash.update(data)
    return blake2b_hash.digest()
