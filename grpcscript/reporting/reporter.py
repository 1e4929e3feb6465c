"""
Reporter for building and managing run reports.

This module provides the Reporter class which helps construct
run reports from document executions.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from .models import (
    RunReport,
    StepRecord,
    StepStatus,
    compute_document_hash,
)

if TYPE_CHECKING:
    from ..assertions.models import AssertionResult
    from ..document.models import CallRecord


class Reporter:
    """
    Builds and manages run reports.

    The Reporter provides a convenient interface for creating reports
    from parsed call records and recording their results.

    Example:
        records = load_document("flows/users.grpc")
        reporter = Reporter.from_records(records, "flows/users.grpc")

        reporter.start_run()

        reporter.start_step(1)
        reporter.complete_step_success(1, response_json='{"id": "1"}')

        reporter.start_step(2)
        reporter.complete_step_failure(2, failure_message="one or more assertions failed")

        report = reporter.finish_run()
        print(report.summary())
    """

    def __init__(self, report: RunReport):
        """
        Initialize with a RunReport.

        Use Reporter.from_records() for the typical case.
        """
        self.report = report

    @classmethod
    def from_records(
        cls,
        records: list[CallRecord],
        document_name: str = "",
        document_text: str | None = None,
        run_id: str | None = None,
    ) -> Reporter:
        """
        Create a Reporter from parsed call records.

        Args:
            records: The records that will be executed; steps are numbered by position
            document_name: Display name, usually the file path
            document_text: Raw document text, hashed for tracking
            run_id: Optional custom run ID (auto-generated if not provided)

        Returns:
            Reporter instance ready to record results
        """
        report = RunReport(
            document_name=document_name,
            document_hash=compute_document_hash(document_text) if document_text else "",
        )

        if run_id:
            report.run_id = run_id

        for position, record in enumerate(records, start=1):
            report.add_step(StepRecord(
                index=position,
                name=record.name,
                service=record.service,
                method=record.method,
                protocol=record.protocol.value,
            ))

        return cls(report)

    def start_run(self) -> None:
        """Mark the run as started."""
        self.report.start()

    def finish_run(self, variables: dict[str, str] | None = None) -> RunReport:
        """
        Mark the run as completed and return the final report.

        Args:
            variables: Final contents of the variable store

        Returns:
            The completed RunReport with summary stats
        """
        if variables is not None:
            self.report.variables = dict(variables)
        self.report.complete()
        return self.report

    def start_step(self, index: int) -> StepRecord | None:
        """Mark a call as started."""
        step = self.report.get_step(index)
        if step:
            step.start()
        return step

    def record_request(
        self,
        index: int,
        address: str,
        headers: dict[str, str],
        body: str,
    ) -> StepRecord | None:
        """Record the request as sent, after variable substitution."""
        step = self.report.get_step(index)
        if step:
            step.address = address
            step.headers = dict(headers)
            step.body = body
        return step

    def record_response(self, index: int, response_json: str) -> StepRecord | None:
        """Record the decoded response."""
        step = self.report.get_step(index)
        if step:
            step.response_json = response_json
        return step

    def record_capture(self, index: int, name: str, value: str) -> StepRecord | None:
        step = self.report.get_step(index)
        if step:
            step.captures[name] = value
        return step

    def record_capture_warning(self, index: int, warning: str) -> StepRecord | None:
        step = self.report.get_step(index)
        if step:
            step.capture_warnings.append(warning)
        return step

    def record_assertion(self, index: int, result: AssertionResult) -> StepRecord | None:
        step = self.report.get_step(index)
        if step:
            step.assertions.append(result)
        return step

    def complete_step_success(
        self,
        index: int,
        response_json: str | None = None,
    ) -> StepRecord | None:
        """Mark a call as successfully completed."""
        step = self.report.get_step(index)
        if step:
            if response_json is not None:
                step.response_json = response_json
            step.complete(StepStatus.PASSED)
        return step

    def complete_step_failure(
        self,
        index: int,
        failure_message: str,
    ) -> StepRecord | None:
        """Mark a call as failed (its assertions did not hold)."""
        step = self.report.get_step(index)
        if step:
            step.failure_message = failure_message
            step.complete(StepStatus.FAILED)
        return step

    def complete_step_error(
        self,
        index: int,
        error_message: str,
        error_details: dict[str, Any] | None = None,
    ) -> StepRecord | None:
        """
        Mark a call as errored (not a test failure, but an execution error).

        Args:
            index: The 1-based index of the call
            error_message: Error description
            error_details: Additional error context
        """
        step = self.report.get_step(index)
        if step:
            step.error_message = error_message
            step.error_details = error_details
            step.complete(StepStatus.ERROR)
        return step

    def skip_step(self, index: int, reason: str | None = None) -> StepRecord | None:
        """Mark a call as skipped."""
        step = self.report.get_step(index)
        if step:
            if reason:
                step.failure_message = f"Skipped: {reason}"
            step.complete(StepStatus.SKIPPED)
        return step

    def save_json(self, path: str | Path) -> None:
        """Save the report to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.report.to_json())

    def get_summary(self) -> str:
        """Get a human-readable summary of the run."""
        return self.report.summary()
