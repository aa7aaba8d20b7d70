import pytest

from access_gate import AccessGate, GatedEntropyService
from entropy_engine import EntropyDiagnostics, EntropyEngine
from seed_source import FrozenSeedSource

SEED_BYTES = bytes.fromhex("11223344556677889900" * 3 + "1122")
SEED = int.from_bytes(SEED_BYTES, "big")

OWNER = "0x00000000000000000000000000000000000a11ce"
ORCHESTRATOR = "0x0000000000000000000000000000000000000b0b"
STRANGER = "0x000000000000000000000000000000000000dead"


@pytest.fixture
def source():
    return FrozenSeedSource(marker=100, timestamp=1_700_000_000, seed=SEED)


@pytest.fixture
def engine(source):
    return EntropyEngine(source)


@pytest.fixture
def diagnostics(engine):
    return EntropyDiagnostics(engine)


@pytest.fixture
def gate(engine):
    return AccessGate(OWNER, engine.ledger)


@pytest.fixture
def service(engine, gate):
    return GatedEntropyService(engine, gate)


class SignalRecorder:
    """Bus subscriber that keeps every signal it sees."""

    def __init__(self, bus=None):
        self.signals = []
        if bus is not None:
            bus.subscribe(self)

    def __call__(self, signal):
        self.signals.append(signal)

    def of_type(self, kind):
        return [s for s in self.signals if isinstance(s, kind)]
