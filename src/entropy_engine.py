import logging

from access_gate import ZERO_ADDRESS, to_address
from error_ledger import Component, ErrorCode, ErrorLedger
from fallback import FallbackGenerator
from seed_source import SeedContext
from segment_codec import (
    MASK256,
    SEED_BITS,
    SEGMENT_BITS,
    SEGMENT_COUNT,
    extract,
    extract_lowest,
    hash_words,
)
from signals import SeedRefreshed, SignalBus
from validation import is_valid_cursor, is_zero_seed, is_zero_slice

DEFAULT_ENGINE_ID = "0x5e6e000000000000000000000000000000000001"


class EngineState:
    def __init__(self):
        self.current_seed = 0
        self.last_refresh_marker = 0  # 0 forces a refresh on first use
        self.segment_cursor = 0
        self.request_counter = 0


class EngineHooks:
    """
    Seam for tests and drills: lets a caller substitute the seed or slice
    the engine is about to validate. The default passes values through.
    """

    def adjust_seed(self, seed):
        return seed

    def adjust_slice(self, segment):
        return segment


class EntropyEngine:
    """
    Derives 256-bit outputs from a cached seed, one 64-bit segment per
    request, cycling through the segments and falling back to emergency
    values whenever the seed or the selected segment is zero.
    """

    def __init__(self, source, engine_id=DEFAULT_ENGINE_ID, ledger=None, bus=None, hooks=None,
                 segment_count=SEGMENT_COUNT, segment_bits=SEGMENT_BITS, seed_bits=SEED_BITS):
        self.source = source
        self.engine_id = to_address(engine_id)
        self.bus = bus or SignalBus()
        self.ledger = ledger or ErrorLedger(self.bus)
        self.hooks = hooks or EngineHooks()
        self.fallback = FallbackGenerator(source, self.engine_id)
        self.segment_count = segment_count
        self.segment_bits = segment_bits
        self.seed_bits = seed_bits
        self.state = EngineState()

    def request(self, salt, caller=ZERO_ADDRESS):
        caller = to_address(caller)
        state = self.state
        state.request_counter += 1

        self._refresh_seed()

        seed = self.hooks.adjust_seed(state.current_seed)
        if is_zero_seed(seed):
            self.ledger.record(Component.ENTROPY_GENERATION, ErrorCode.ZERO_SEED, "request")
            return self._emergency(salt, caller)

        cursor = state.segment_cursor
        if not is_valid_cursor(cursor, self.segment_count):
            self.ledger.record(Component.SEGMENT_EXTRACTION, ErrorCode.SEGMENT_INDEX_OUT_OF_BOUNDS, "request")
            cursor = 0
            state.segment_cursor = 0

        shift = cursor * self.segment_bits
        if shift >= self.seed_bits:
            self.ledger.record(Component.SEGMENT_EXTRACTION, ErrorCode.SHIFT_OVERFLOW, "request")
            segment = extract_lowest(seed)
        else:
            segment = extract(seed, shift)

        segment = self.hooks.adjust_slice(segment)
        if is_zero_slice(segment):
            self.ledger.record(Component.ENTROPY_GENERATION, ErrorCode.ZERO_SLICE, "request")
            return self._emergency(salt, caller)

        output = hash_words(
            segment,
            cursor,
            self.source.timestamp(),
            self.source.current_marker(),
            caller,
            salt,
            state.request_counter,
        )
        state.segment_cursor = (cursor + 1) % self.segment_count
        logging.debug(f"[EntropyEngine] request #{state.request_counter} segment={cursor} output={output:064x}")
        return output

    def _refresh_seed(self):
        state = self.state
        marker = self.source.current_marker()
        if marker == state.last_refresh_marker:
            return

        context = SeedContext(
            timestamp=self.source.timestamp(),
            marker=marker,
            request_counter=state.request_counter,
            previous_reference=self.source.historical_seed(marker),
            engine_id=self.engine_id,
        )
        seed = self.source.derive_seed(context) & MASK256
        if is_zero_seed(seed):
            self.ledger.record(Component.BLOCK_HASH, ErrorCode.ZERO_SEED, "refresh_seed")
            seed = self.source.historical_seed(marker) & MASK256
            if is_zero_seed(seed):
                self.ledger.record(Component.BLOCK_HASH, ErrorCode.ZERO_SEED_FALLBACK_ALSO_ZERO, "refresh_seed")
                seed = self.fallback.fallback_seed()

        state.current_seed = seed
        state.last_refresh_marker = marker
        logging.info(f"[EntropyEngine] Seed refreshed at marker {marker}: {seed:064x}")
        self.bus.emit(SeedRefreshed(marker, seed))

    def _emergency(self, salt, caller):
        return self.fallback.emergency_output(
            salt,
            self.state.request_counter,
            self.ledger.count(Component.ENTROPY_GENERATION, ErrorCode.ZERO_SEED),
            self.ledger.count(Component.ENTROPY_GENERATION, ErrorCode.ZERO_SLICE),
            caller,
        )


class EntropyDiagnostics:
    """
    Diagnostic-only view of an engine. Exposes internals and forced
    overrides; never hand this to production callers.
    """

    def __init__(self, engine):
        self.engine = engine

    @property
    def current_seed(self):
        return self.engine.state.current_seed

    @property
    def segment_cursor(self):
        return self.engine.state.segment_cursor

    @property
    def request_counter(self):
        return self.engine.state.request_counter

    @property
    def last_refresh_marker(self):
        return self.engine.state.last_refresh_marker

    def extract_segment(self, seed, index):
        if not is_valid_cursor(index, self.engine.segment_count):
            raise ValueError(f"Segment index {index} outside [0, {self.engine.segment_count})")
        return extract(seed & MASK256, index * self.engine.segment_bits)

    def force_seed(self, seed):
        self.engine.state.current_seed = seed & MASK256

    def force_cursor(self, index):
        self.engine.state.segment_cursor = index

    def force_refresh(self):
        self.engine.state.last_refresh_marker = 0

    def reset_errors(self):
        self.engine.ledger.reset()
