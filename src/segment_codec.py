from Crypto.Hash import keccak

SEED_BITS = 256
SEGMENT_BITS = 64
SEGMENT_COUNT = SEED_BITS // SEGMENT_BITS

MASK64 = (1 << 64) - 1
MASK256 = (1 << 256) - 1
WORD_BYTES = 32


def extract(seed, shift):
    # Callers guarantee shift < SEED_BITS.
    return (seed >> shift) & MASK64


def extract_lowest(seed):
    return extract(seed, 0)


def split_segments(seed):
    """Return the four 64-bit slices of a seed, ordered by cursor index."""
    return tuple(extract(seed, i * SEGMENT_BITS) for i in range(SEGMENT_COUNT))


def pack_words(*values):
    """
    Packed encoding fed to the hash: ints become 32-byte big-endian words,
    bytes (addresses, tags) are appended verbatim.
    """
    out = bytearray()
    for v in values:
        if isinstance(v, (bytes, bytearray)):
            out.extend(v)
        elif isinstance(v, str):
            out.extend(v.encode())
        else:
            out.extend((int(v) & MASK256).to_bytes(WORD_BYTES, 'big'))
    return bytes(out)


def hash_words(*values):
    """Keccak-256 over the packed values, as a 256-bit integer."""
    h = keccak.new(digest_bits=256)
    h.update(pack_words(*values))
    return int.from_bytes(h.digest(), 'big')


def to_bytes32(value):
    return (value & MASK256).to_bytes(WORD_BYTES, 'big')
