import time
from abc import ABC, abstractmethod
from collections import namedtuple

from segment_codec import MASK256, hash_words

# Ledgers only expose hashes of the most recent blocks.
BLOCK_HASH_WINDOW = 256
DEFAULT_BLOCK_SPACING = 12

SeedContext = namedtuple(
    "SeedContext",
    ["timestamp", "marker", "request_counter", "previous_reference", "engine_id"],
)


class SeedSource(ABC):
    """
    Host environment boundary. The engine only ever asks for the current
    marker, the current timestamp, a derived seed and a historical seed.
    A zero seed is a legitimate answer, not an error.
    """

    @abstractmethod
    def current_marker(self):
        ...

    @abstractmethod
    def timestamp(self):
        ...

    @abstractmethod
    def derive_seed(self, context):
        ...

    @abstractmethod
    def historical_seed(self, marker):
        """Hash of the most recent block before `marker`, or 0 if unavailable."""
        ...


class SimulatedLedger(SeedSource):
    """
    In-memory chain of blocks: block number is the refresh marker, block
    hashes are chained Keccak-256 digests of parent hash, number and time.
    """

    def __init__(self, start_block=1, start_time=None, block_spacing=DEFAULT_BLOCK_SPACING,
                 genesis=b"segment-entropy-genesis", zero_seed_blocks=(), pruned_blocks=()):
        if start_block < 1:
            raise ValueError("start_block must be >= 1")
        self.block_number = start_block
        self.block_spacing = block_spacing
        self._timestamp = int(time.time()) if start_time is None else int(start_time)
        self.zero_seed_blocks = set(zero_seed_blocks)
        self.pruned_blocks = set(pruned_blocks)
        parent = hash_words(genesis)
        self._hashes = {}
        for n in range(max(0, start_block - BLOCK_HASH_WINDOW), start_block):
            parent = hash_words(parent, n, self._timestamp - (start_block - n) * block_spacing)
            self._hashes[n] = parent

    def mine(self, count=1, spacing=None):
        spacing = self.block_spacing if spacing is None else spacing
        for _ in range(count):
            parent = self._hashes.get(self.block_number - 1, 0)
            self._hashes[self.block_number] = hash_words(parent, self.block_number, self._timestamp)
            self._hashes.pop(self.block_number - BLOCK_HASH_WINDOW, None)
            self.block_number += 1
            self._timestamp += spacing
        return self.block_number

    def advance_time(self, seconds):
        self._timestamp += seconds
        return self._timestamp

    def block_hash(self, number):
        if number < 0 or number >= self.block_number:
            return 0
        if self.block_number - number > BLOCK_HASH_WINDOW or number in self.pruned_blocks:
            return 0
        return self._hashes.get(number, 0)

    def current_marker(self):
        return self.block_number

    def timestamp(self):
        return self._timestamp

    def derive_seed(self, context):
        if context.marker in self.zero_seed_blocks:
            return 0
        return hash_words(
            context.previous_reference,
            context.timestamp,
            context.marker,
            context.request_counter,
            context.engine_id,
        )

    def historical_seed(self, marker):
        return self.block_hash(marker - 1)


class FrozenSeedSource(SeedSource):
    """Fixed marker, time and seeds. Attributes may be changed between calls."""

    def __init__(self, marker=1, timestamp=1_700_000_000, seed=0, historical=0):
        self.marker = marker
        self.time = timestamp
        self.seed = seed
        self.historical = historical
        self.derive_calls = 0

    def current_marker(self):
        return self.marker

    def timestamp(self):
        return self.time

    def derive_seed(self, context):
        self.derive_calls += 1
        return self.seed & MASK256

    def historical_seed(self, marker):
        return self.historical & MASK256
