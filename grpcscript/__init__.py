"""
grpcscript - Scripted gRPC Request Runner

This package runs plain-text .grpc documents: sequences of unary calls
whose responses can be captured into variables and checked with
JSONPath assertions.

Subpackages:
    - document: Parse and validate .grpc request documents
    - protos: Compile .proto files and encode/decode messages
    - transport: gRPC, gRPC-Web and Connect transports
    - assertions: Path evaluation and assertion engine
    - reporting: Run reports and result tracking

Usage:
    from grpcscript import load_document, load_protos, Runner

    records = load_document("flows/users.grpc")
    registry = load_protos("./protos")

    report = await Runner(registry).run(records)
    print(report.summary())
"""

__version__ = "0.1.0"
__author__ = "Ahaan Chaudhuri"

# Re-export document for convenience
from .document import (
    # Loader functions
    load_document,
    validate_document,
    validate_document_file,
    # Parser
    parse_document,
    # Models
    CallRecord,
    AssertionSpec,
    AssertionKind,
    AssertOp,
    ProtocolVariant,
    # Errors
    StructuralParseError,
    # Validation
    ValidationResult,
    ValidationError,
)

# Re-export protos for convenience
from .protos import (
    load_protos,
    Registry,
    Operation,
    ProtoCodec,
)

# Re-export transport for convenience
from .transport import (
    create_transport,
    BaseTransport,
    RPCError,
    RPCRequest,
    RPCResponse,
)

# Re-export assertions for convenience
from .assertions import (
    AssertionResult,
    AssertionStatus,
    AssertionEngine,
    evaluate_jsonpath,
)

# Re-export reporting for convenience
from .reporting import (
    RunReport,
    RunStatus,
    StepRecord,
    StepStatus,
    Reporter,
)

from .template import substitute
from .runner import Runner, VariableStore, CallError

__all__ = [
    # Package info
    "__version__",
    "__author__",
    # Document
    "load_document",
    "validate_document",
    "validate_document_file",
    "parse_document",
    "CallRecord",
    "AssertionSpec",
    "AssertionKind",
    "AssertOp",
    "ProtocolVariant",
    "StructuralParseError",
    "ValidationResult",
    "ValidationError",
    # Protos
    "load_protos",
    "Registry",
    "Operation",
    "ProtoCodec",
    # Transport
    "create_transport",
    "BaseTransport",
    "RPCError",
    "RPCRequest",
    "RPCResponse",
    # Assertions
    "AssertionResult",
    "AssertionStatus",
    "AssertionEngine",
    "evaluate_jsonpath",
    # Reporting
    "RunReport",
    "RunStatus",
    "StepRecord",
    "StepStatus",
    "Reporter",
    # Execution
    "substitute",
    "Runner",
    "VariableStore",
    "CallError",
]
