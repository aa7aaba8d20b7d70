import logging

import numpy as np

from error_ledger import COMPONENT_NAMES, Component, ErrorCode
from randomness_tests import outputs_to_bits

# Audit thresholds
WARN_HD_MEAN_LOW = 0.45     # mean pairwise Hamming fraction below this hints at correlation
# bias thresholds in units of the binomial std dev 0.5/sqrt(batch)
WARN_BIT_AVG_BIAS_SIGMAS = 1.5
WARN_BIT_MAX_BIAS_SIGMAS = 4.5
OUTPUT_BITS = 256


class OutputAuditor:
    """
    Batch correlation check over recent engine outputs: pairwise Hamming
    distances, per-bit bias and exact collisions.
    """

    def __init__(self, min_batch=20, max_batch=50, audit_interval=1):
        self.outputs = []
        self.min_batch = min_batch
        self.max_batch = max_batch
        self.audit_interval = audit_interval  # audit every Nth output once the batch is full enough
        self.seen = 0
        self.last_summary = None

    def add_output(self, value):
        self.outputs.append(value)
        self.seen += 1
        if len(self.outputs) > self.max_batch:
            self.outputs = self.outputs[-self.max_batch:]
        if len(self.outputs) >= self.min_batch and self.seen % self.audit_interval == 0:
            return self.audit()
        return None

    def audit(self):
        n = len(self.outputs)
        if n < max(2, self.min_batch):
            return None
        bits = outputs_to_bits(self.outputs).reshape(n, OUTPUT_BITS)

        rows, cols = np.triu_indices(n, k=1)
        dists = np.count_nonzero(bits[rows] != bits[cols], axis=1) / OUTPUT_BITS
        bias = np.abs(bits.mean(axis=0) - 0.5)
        sigma = 0.5 / np.sqrt(n)

        summary = {
            "batch": n,
            "hamming_mean": float(dists.mean()),
            "hamming_std": float(dists.std()),
            "avg_bit_bias": float(bias.mean()),
            "max_bit_bias": float(bias.max()),
            "collisions": len(set(self.outputs)) != n,
        }
        summary["suspicious"] = bool(
            summary["collisions"]
            or summary["hamming_mean"] < WARN_HD_MEAN_LOW
            or summary["avg_bit_bias"] > WARN_BIT_AVG_BIAS_SIGMAS * sigma
            or summary["max_bit_bias"] > WARN_BIT_MAX_BIAS_SIGMAS * sigma
        )
        self.last_summary = summary

        logging.info(f"[OutputAuditor] Hamming mean={summary['hamming_mean']:.4f}, std={summary['hamming_std']:.4f}, "
                     f"avg_bit_bias={summary['avg_bit_bias']:.4f}, max_bit_bias={summary['max_bit_bias']:.4f}, "
                     f"collisions={summary['collisions']}")
        if summary["suspicious"]:
            logging.warning("[OutputAuditor] Potential correlation or bias detected in recent output batch.")
        return summary


def ledger_report(ledger):
    """Per-component error totals with the non-zero codes behind them."""
    report = {}
    for component in Component:
        codes = {code.name: ledger.count(component, code) for code in ErrorCode if ledger.count(component, code)}
        report[COMPONENT_NAMES[component]] = {"total": ledger.total_for(component), "codes": codes}
    return report
