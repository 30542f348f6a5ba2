"""
Audits comparing the streaming engine against independent computations.
"""

from .parity import (
    DEFAULT_CASES,
    IndicatorParityResult,
    ParityAuditResult,
    audit_indicator,
    generate_synthetic_ohlcv,
    run_parity_audit,
)

__all__ = [
    "DEFAULT_CASES",
    "IndicatorParityResult",
    "ParityAuditResult",
    "audit_indicator",
    "generate_synthetic_ohlcv",
    "run_parity_audit",
]
