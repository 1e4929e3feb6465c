"""
Reporting for Document Runs

This package provides reporting capabilities for capturing complete
records of .grpc document runs.

Features:
    - Run metadata (ID, timestamp, document info)
    - Per-call records with timing
    - Request/response capture
    - Captured variables and assertion outcomes
    - JSON serialization
    - Human-readable summaries

Usage:
    from grpcscript.document import load_document
    from grpcscript.reporting import Reporter

    records = load_document("flows/users.grpc")
    reporter = Reporter.from_records(records, "flows/users.grpc")

    reporter.start_run()
    reporter.start_step(1)
    reporter.complete_step_success(1, response_json='{"id": "1"}')

    report = reporter.finish_run()
    print(report.summary())

    reporter.save_json("reports/run.json")
"""

# Models
from .models import (
    RunReport,
    RunStatus,
    StepCounts,
    StepRecord,
    StepStatus,
    compute_document_hash,
)

# Reporter
from .reporter import Reporter

__all__ = [
    # Models
    "RunReport",
    "RunStatus",
    "StepCounts",
    "StepRecord",
    "StepStatus",
    "compute_document_hash",
    # Reporter
    "Reporter",
]
