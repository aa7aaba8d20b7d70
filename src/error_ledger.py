import logging
from enum import IntEnum

from signals import ErrorRecorded

MAX_COUNT = (1 << 256) - 1


class Component(IntEnum):
    BLOCK_HASH = 1
    SEGMENT_EXTRACTION = 2
    ENTROPY_GENERATION = 3
    ACCESS_CONTROL = 4


class ErrorCode(IntEnum):
    ZERO_SEED = 1
    ZERO_SEED_FALLBACK_ALSO_ZERO = 2
    ZERO_SLICE = 3
    SEGMENT_INDEX_OUT_OF_BOUNDS = 4
    SHIFT_OVERFLOW = 5
    ORCHESTRATOR_NOT_CONFIGURED = 6
    UNAUTHORIZED_CALLER = 7
    ORCHESTRATOR_ALREADY_CONFIGURED = 8
    INVALID_ORCHESTRATOR_ADDRESS = 9


COMPONENT_NAMES = {
    Component.BLOCK_HASH: "BlockHash",
    Component.SEGMENT_EXTRACTION: "SegmentExtraction",
    Component.ENTROPY_GENERATION: "EntropyGeneration",
    Component.ACCESS_CONTROL: "AccessControl",
}


class ErrorLedger:
    """
    Sparse (component, error code) counters used for post-hoc health checks.
    Counts only ever grow; reset() is the administrative escape hatch.
    """

    def __init__(self, bus=None):
        self.bus = bus
        self._counts = {}

    def record(self, component, code, operation):
        component = Component(component)
        code = ErrorCode(code)
        key = (component, code)
        current = self._counts.get(key, 0)
        self._counts[key] = min(current + 1, MAX_COUNT)
        name = COMPONENT_NAMES[component]
        logging.warning(f"[ErrorLedger] {name}.{operation}: {code.name} (count={self._counts[key]})")
        if self.bus is not None:
            self.bus.emit(ErrorRecorded(name, operation, int(code)))

    def count(self, component, code):
        return self._counts.get((Component(component), ErrorCode(code)), 0)

    def total_for(self, component):
        component = Component(component)
        return sum(self._counts.get((component, code), 0) for code in ErrorCode)

    def snapshot(self):
        return {key: n for key, n in self._counts.items() if n}

    def reset(self):
        logging.info("[ErrorLedger] Counters reset.")
        self._counts = {}
