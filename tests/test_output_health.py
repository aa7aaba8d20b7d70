import pytest

from entropy_engine import EntropyEngine
from error_ledger import Component, ErrorCode, ErrorLedger
from output_auditor import OutputAuditor, ledger_report
from randomness_tests import RandomnessTester, outputs_to_bits
from seed_source import SimulatedLedger

ALTERNATING = int("aa" * 32, 16)


def engine_outputs(count):
    ledger = SimulatedLedger(start_block=50, start_time=1_600_000_000)
    engine = EntropyEngine(ledger)
    outputs = []
    for i in range(count):
        outputs.append(engine.request(i))
        if i % 4 == 3:
            ledger.mine()
    return outputs


def test_outputs_to_bits_is_big_endian() -> None:
    bits = outputs_to_bits([1, 1 << 255])
    assert len(bits) == 512
    assert bits[255] == 1 and bits[:255].sum() == 0
    assert bits[256] == 1 and bits[257:].sum() == 0


def test_short_stream_is_reported() -> None:
    assert RandomnessTester().run_all_tests([]) == {"error": "Bit sequence too short."}


def test_constant_stream_fails() -> None:
    results = RandomnessTester().run_all_tests([0] * 8)
    assert not results["monobit_test"]["passed"]
    assert results["runs_test"]["p_value"] == 0.0
    assert not results["cumulative_sums_test"]["passed"]


def test_alternating_stream_fails_runs_but_balances_monobit() -> None:
    results = RandomnessTester().run_all_tests([ALTERNATING] * 8)
    assert results["monobit_test"]["p_value"] == pytest.approx(1.0)
    assert not results["runs_test"]["passed"]


def test_engine_outputs_produce_valid_p_values() -> None:
    results = RandomnessTester().run_all_tests(engine_outputs(32))
    assert set(results) == {"monobit_test", "runs_test", "cumulative_sums_test", "discrete_fourier_transform_test"}
    for result in results.values():
        assert 0.0 <= result["p_value"] <= 1.0


def test_min_entropy_per_bit() -> None:
    tester = RandomnessTester()
    assert tester.min_entropy_per_bit([]) == 0.0
    assert tester.min_entropy_per_bit([0, 0]) == 0.0
    assert tester.min_entropy_per_bit([ALTERNATING]) == pytest.approx(1.0)


def test_auditor_waits_for_min_batch() -> None:
    auditor = OutputAuditor(min_batch=5, max_batch=10)
    assert all(auditor.add_output(v) is None for v in range(1, 5))
    assert auditor.add_output(5) is not None


def test_auditor_flags_collisions() -> None:
    auditor = OutputAuditor(min_batch=3, max_batch=10)
    for _ in range(3):
        summary = auditor.add_output(ALTERNATING)
    assert summary["collisions"]
    assert summary["hamming_mean"] == 0.0
    assert summary["suspicious"]


def test_auditor_keeps_last_batch() -> None:
    auditor = OutputAuditor(min_batch=2, max_batch=4)
    for v in range(1, 10):
        auditor.add_output(v)
    assert auditor.outputs == [6, 7, 8, 9]


def test_auditor_on_engine_outputs() -> None:
    auditor = OutputAuditor(min_batch=20, max_batch=40)
    for output in engine_outputs(24):
        auditor.add_output(output)
    summary = auditor.last_summary
    assert summary["batch"] == 24
    assert not summary["collisions"]
    assert summary["hamming_mean"] > 0.45


def test_ledger_report() -> None:
    ledger = ErrorLedger()
    ledger.record(Component.BLOCK_HASH, ErrorCode.ZERO_SEED, "refresh_seed")
    ledger.record(Component.ACCESS_CONTROL, ErrorCode.UNAUTHORIZED_CALLER, "check")
    ledger.record(Component.ACCESS_CONTROL, ErrorCode.UNAUTHORIZED_CALLER, "check")
    report = ledger_report(ledger)
    assert report["BlockHash"] == {"total": 1, "codes": {"ZERO_SEED": 1}}
    assert report["AccessControl"] == {"total": 2, "codes": {"UNAUTHORIZED_CALLER": 2}}
    assert report["SegmentExtraction"] == {"total": 0, "codes": {}}


def test_auditor_audit_interval() -> None:
    auditor = OutputAuditor(min_batch=2, max_batch=4, audit_interval=4)
    results = [auditor.add_output(v) for v in range(1, 10)]
    audited = [i for i, r in enumerate(results) if r is not None]
    assert audited == [3, 7]
    assert auditor.last_summary["batch"] == 4
