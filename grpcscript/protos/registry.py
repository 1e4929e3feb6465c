"""
Registry of services and methods compiled from .proto files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.descriptor import Descriptor, ServiceDescriptor
from google.protobuf.message import Message

logger = logging.getLogger(__name__)


class OperationNotFoundError(LookupError):
    """A service or method is not present in the registry."""

    def __init__(self, message: str, available: list[str]):
        self.message = message
        self.available = available
        super().__init__(message)


@dataclass
class MethodInfo:
    """A method as shown by `grpcscript list`."""
    name: str
    input_type: str
    output_type: str


@dataclass
class ServiceInfo:
    """A service and its methods."""
    full_name: str
    methods: list[MethodInfo] = field(default_factory=list)


@dataclass
class Operation:
    """A resolved unary method, ready to be encoded and invoked."""
    service: str
    method: str
    input_type: Descriptor
    output_type: Descriptor

    @property
    def path(self) -> str:
        """RPC path, e.g. /example.UserService/GetUser."""
        return f"/{self.service}/{self.method}"

    def new_request(self) -> Message:
        return message_factory.GetMessageClass(self.input_type)()

    def new_response(self) -> Message:
        return message_factory.GetMessageClass(self.output_type)()


class Registry:
    """
    Holds compiled proto descriptors and resolves service methods.

    Example:
        registry = load_protos("./protos")
        operation = registry.find_method("example.UserService", "GetUser")
    """

    def __init__(self, pool: descriptor_pool.DescriptorPool | None = None):
        self.pool = pool or descriptor_pool.DescriptorPool()
        self._services: dict[str, ServiceDescriptor] = {}

    def add_descriptor_set(self, descriptor_set: descriptor_pb2.FileDescriptorSet) -> None:
        """Add compiled files (dependencies first) and index their services."""
        for file_proto in descriptor_set.file:
            self.pool.AddSerializedFile(file_proto.SerializeToString())

        for file_proto in descriptor_set.file:
            file_desc = self.pool.FindFileByName(file_proto.name)
            for service in file_desc.services_by_name.values():
                self._services[service.full_name] = service
                logger.debug(f"Registered service {service.full_name}")

    @property
    def service_names(self) -> list[str]:
        return sorted(self._services)

    def list_services(self) -> list[ServiceInfo]:
        """Return every registered service with its methods, sorted by name."""
        result = []
        for name in self.service_names:
            service = self._services[name]
            result.append(ServiceInfo(
                full_name=name,
                methods=[
                    MethodInfo(
                        name=m.name,
                        input_type=m.input_type.full_name,
                        output_type=m.output_type.full_name,
                    )
                    for m in service.methods
                ],
            ))
        return result

    def find_service(self, name: str) -> ServiceDescriptor:
        """
        Find a service by its fully qualified name.

        Raises:
            OperationNotFoundError: If the service is unknown
        """
        service = self._services.get(name)
        if service is None:
            available = self.service_names
            raise OperationNotFoundError(
                f"service not found: {name}\n\nAvailable services: {', '.join(available)}",
                available,
            )
        return service

    def find_method(self, service_name: str, method_name: str) -> Operation:
        """
        Resolve a service method to an Operation.

        Raises:
            OperationNotFoundError: If the service or method is unknown
        """
        service = self.find_service(service_name)
        method = service.methods_by_name.get(method_name)
        if method is None:
            available = [m.name for m in service.methods]
            raise OperationNotFoundError(
                f"method {method_name!r} not found in service {service_name}. "
                f"Available methods: {', '.join(available)}",
                available,
            )
        return Operation(
            service=service.full_name,
            method=method.name,
            input_type=method.input_type,
            output_type=method.output_type,
        )
