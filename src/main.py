import argparse
import logging
import sys

from access_gate import AccessGate, GatedEntropyService, format_address, to_address
from entropy_engine import EntropyEngine
from output_auditor import OutputAuditor, ledger_report
from randomness_tests import DEFAULT_ALPHA, RandomnessTester
from seed_source import DEFAULT_BLOCK_SPACING, SimulatedLedger

DEFAULT_OWNER = "0x00000000000000000000000000000000000a11ce"
DEFAULT_ORCHESTRATOR = "0x0000000000000000000000000000000000000b0b"
DEFAULT_REQUESTS = 64
DEFAULT_REQUESTS_PER_BLOCK = 4
DEFAULT_AUDIT_WINDOW = 50


def setup_logging(log_file=None, verbose=False):
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the segmented-seed entropy engine against a simulated ledger.")
    parser.add_argument("--requests", type=int, default=DEFAULT_REQUESTS, help="Number of entropy requests to issue")
    parser.add_argument("--salt", type=lambda s: int(s, 0), default=0, help="Base salt (int, 0x-hex allowed)")
    parser.add_argument("--requests-per-block", type=int, default=DEFAULT_REQUESTS_PER_BLOCK,
                        help="Mine a new block after this many requests")
    parser.add_argument("--block-spacing", type=int, default=DEFAULT_BLOCK_SPACING, help="Seconds between blocks")
    parser.add_argument("--owner", default=DEFAULT_OWNER, help="Deployment owner address")
    parser.add_argument("--orchestrator", default=DEFAULT_ORCHESTRATOR, help="Authorized caller address")
    parser.add_argument("--output-file", default=None, help="Append outputs as hex lines to this file")
    parser.add_argument("--log-file", default=None, help="Also log to this file")
    parser.add_argument("--alpha", type=float, default=DEFAULT_ALPHA, help="Significance level for randomness tests")
    parser.add_argument("--audit-batch", type=int, default=20, help="Minimum batch size for the output audit")
    parser.add_argument("--audit-window", type=int, default=DEFAULT_AUDIT_WINDOW,
                        help="Number of most recent outputs kept for the output audit")
    parser.add_argument("--verbose", action="store_true", help="Log every output")
    args = parser.parse_args(argv)
    if args.requests < 1:
        parser.error("--requests must be >= 1")
    if args.requests_per_block < 1:
        parser.error("--requests-per-block must be >= 1")
    if args.audit_window < args.audit_batch or args.audit_window < 2:
        parser.error("--audit-window must be >= --audit-batch and >= 2")
    return args


def run(args):
    logging.info("Initializing entropy engine components...")
    ledger_source = SimulatedLedger(block_spacing=args.block_spacing)
    engine = EntropyEngine(ledger_source)
    gate = AccessGate(args.owner, engine.ledger)
    service = GatedEntropyService(engine, gate)
    service.configure(args.owner, args.orchestrator)
    tester = RandomnessTester(alpha=args.alpha)
    auditor = OutputAuditor(min_batch=args.audit_batch, max_batch=args.audit_window, audit_interval=args.audit_window)
    logging.info(f"Orchestrator: {format_address(to_address(args.orchestrator))}")

    outputs = []
    for i in range(args.requests):
        output = service.request(args.orchestrator, args.salt + i)
        outputs.append(output)
        auditor.add_output(output)
        if (i + 1) % args.requests_per_block == 0:
            ledger_source.mine()

    if args.output_file:
        with open(args.output_file, "a") as f:
            for output in outputs:
                f.write(f"{output:064x}\n")
        logging.info(f"{len(outputs)} outputs written to {args.output_file}")

    summary = auditor.audit()

    logging.info("Error ledger:")
    for name, entry in ledger_report(engine.ledger).items():
        logging.info(f"  - {name}: {entry['total']} {entry['codes'] or ''}")

    logging.info(f"Min-Entropy per bit: {tester.min_entropy_per_bit(outputs):.4f}")
    results = tester.run_all_tests(outputs)
    if "error" in results:
        logging.warning(f"Randomness tests skipped: {results['error']}")
    else:
        logging.info("Randomness Test Results:")
        for test_name, result in results.items():
            status = "PASSED" if result["passed"] else "FAILED"
            logging.info(f"  - {test_name}: {status} (p-value: {result['p_value']:.6f})")

    return {"outputs": outputs, "audit": summary, "tests": results, "ledger": ledger_report(engine.ledger)}


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    run(args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
