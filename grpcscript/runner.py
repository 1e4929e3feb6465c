"""
Execution of parsed request documents.

The Runner executes call records strictly in order. Before each call the
address, body and header values are rewritten with the variables captured
so far; after it, [Captures] add variables and [Asserts] decide whether
the run continues. Any failure to resolve, encode, send or decode a call,
and any failed assertion, ends the run; the remaining calls are skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any, Callable

from rich.console import Console
from rich.markup import escape

from .assertions import AssertionEngine, PathEvaluationError, evaluate_jsonpath
from .document.models import CallRecord, ProtocolVariant
from .protos import CodecError, Operation, OperationNotFoundError, ProtoCodec, Registry
from .reporting import Reporter, RunReport
from .template import substitute
from .transport import BaseTransport, RPCRequest, create_transport

logger = logging.getLogger(__name__)

TransportFactory = Callable[[ProtocolVariant], BaseTransport]


class VariableStore(Mapping[str, str]):
    """
    Variables captured during a run.

    Values are kept as the stringified path results. A variable stays set
    for the rest of the run once captured, even if a later call fails.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None):
        self._values: dict[str, str] = {k: str(v) for k, v in (initial or {}).items()}

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __repr__(self) -> str:
        return f"VariableStore({self._values!r})"


class CallError(Exception):
    """A call could not be completed; always fatal to the run."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class Runner:
    """
    Executes call records against a registry, codec and transports.

    Transports are created on first use, one per protocol variant, and
    closed when the run ends.

    Example:
        registry = load_protos("./protos")
        runner = Runner(registry)
        report = await runner.run(load_document("flows/users.grpc"))
        print(report.summary())
    """

    def __init__(
        self,
        registry: Registry,
        codec: ProtoCodec | None = None,
        transport_factory: TransportFactory = create_transport,
        console: Console | None = None,
        quiet: bool = False,
    ):
        self.registry = registry
        self.codec = codec or ProtoCodec(registry.pool)
        self.transport_factory = transport_factory
        self.console = console or Console()
        self.quiet = quiet
        self.engine = AssertionEngine()
        self._transports: dict[ProtocolVariant, BaseTransport] = {}

    # ─────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────

    async def run(
        self,
        records: list[CallRecord],
        variables: VariableStore | None = None,
        document_name: str = "",
        document_text: str | None = None,
    ) -> RunReport:
        """
        Execute every record in order and return the run report.

        Args:
            records: Parsed call records; rewritten in place with substituted values
            variables: Store shared across the run (a new empty one by default)
            document_name: Name shown in the report
            document_text: Raw document text, hashed into the report
        """
        variables = variables if variables is not None else VariableStore()
        reporter = Reporter.from_records(records, document_name, document_text)
        reporter.start_run()

        try:
            for step, record in enumerate(records, start=1):
                if step > 1:
                    self._print("\n---")

                if not await self._execute(step, record, variables, reporter):
                    for later in range(step + 1, len(records) + 1):
                        reporter.skip_step(later, f"request {step} did not pass")
                    break
        finally:
            await self.close()

        return reporter.finish_run(variables.as_dict())

    async def call(self, record: CallRecord) -> str:
        """
        Send a single record and return the response JSON.

        Captures and assertions are not evaluated.

        Raises:
            CallError: If the call cannot be completed
        """
        try:
            _, response_json = await self._dispatch(record)
        finally:
            await self.close()
        return response_json

    async def close(self) -> None:
        """Disconnect every transport opened by this runner."""
        for protocol, transport in self._transports.items():
            logger.debug(f"Closing {protocol.value} transport")
            await transport.disconnect()
        self._transports.clear()

    # ─────────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────────

    async def _execute(
        self,
        step: int,
        record: CallRecord,
        variables: VariableStore,
        reporter: Reporter,
    ) -> bool:
        """Run one record as report step `step`; returns False if the run must stop."""
        reporter.start_step(step)

        record.address = substitute(record.address, variables)
        record.body = substitute(record.body, variables)
        for key, value in record.headers.items():
            record.headers[key] = substitute(value, variables)
        reporter.record_request(step, record.address, record.headers, record.body)

        self._print(f"# {escape(record.title)}", style="bold")
        self._print(f"# {escape(record.operation)}\n", style="dim")
        logger.info(f"Calling {record.operation} at {record.address} ({record.protocol.value})")

        try:
            operation, response_json = await self._dispatch(record)
        except CallError as e:
            reporter.complete_step_error(step, e.message, e.details)
            self._print_error(e.message)
            return False

        reporter.record_response(step, response_json)
        if not self.quiet:
            self.console.print(response_json, markup=False, highlight=False)

        self._capture(step, record, response_json, variables, reporter)

        if not self._assert(step, record, response_json, reporter):
            reporter.complete_step_failure(step, "one or more assertions failed")
            self._print_error("one or more assertions failed")
            return False

        reporter.complete_step_success(step)
        return True

    async def _dispatch(self, record: CallRecord) -> tuple[Operation, str]:
        """Resolve, encode, send and decode one call."""
        try:
            operation = self.registry.find_method(record.service, record.method)
        except OperationNotFoundError as e:
            raise CallError(str(e), {"available": e.available}) from e

        try:
            payload = self.codec.encode(record.body, operation)
        except CodecError as e:
            raise CallError(f"failed to parse JSON input: {e}") from e

        transport = await self._transport_for(record.protocol)
        response = await transport.invoke(RPCRequest(
            address=record.address,
            path=operation.path,
            payload=payload,
            headers=dict(record.headers),
            timeout=record.timeout,
        ))

        if not response.success:
            error = response.error
            raise CallError(
                f"RPC call failed: {error}",
                error.to_dict() if error else None,
            )

        try:
            response_json = self.codec.decode(response.payload, operation)
        except CodecError as e:
            raise CallError(f"failed to format response: {e}") from e

        return operation, response_json

    async def _transport_for(self, protocol: ProtocolVariant) -> BaseTransport:
        transport = self._transports.get(protocol)
        if transport is None:
            transport = self.transport_factory(protocol)
            await transport.connect()
            self._transports[protocol] = transport
        return transport

    def _capture(
        self,
        step: int,
        record: CallRecord,
        response_json: str,
        variables: VariableStore,
        reporter: Reporter,
    ) -> None:
        if not record.captures:
            return

        self._print("\n# Captures:")
        for name, path in record.captures.items():
            try:
                value = evaluate_jsonpath(response_json, path)
            except PathEvaluationError as e:
                warning = f"failed to capture variable '{name}' from path '{path}': {e}"
                logger.warning(warning)
                reporter.record_capture_warning(step, warning)
                self._print(f"# Warning: {escape(warning)}", style="yellow")
                continue

            variables.set(name, value)
            reporter.record_capture(step, name, value)
            self._print(f"# {escape(name)} = {escape(value)}")

    def _assert(self, step: int, record: CallRecord, response_json: str, reporter: Reporter) -> bool:
        if not record.assertions:
            return True

        self._print("\n# Asserts:")
        all_passed = True
        for spec in record.assertions:
            result = self.engine.check(spec, response_json)
            reporter.record_assertion(step, result)
            self._print(f"# {escape(result.message)}", style="green" if result.passed else "red")
            if not result.passed:
                all_passed = False
        return all_passed

    # ─────────────────────────────────────────────────────────────────────
    # Output
    # ─────────────────────────────────────────────────────────────────────

    def _print(self, message: str, style: str | None = None) -> None:
        if not self.quiet:
            self.console.print(message, style=style)

    def _print_error(self, message: str) -> None:
        # Errors are shown even in quiet mode
        self.console.print(f"[red]❌ Error:[/red] {escape(message)}")
