from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from podmanager.models.domain import QuorumResult


class PodManagerError(Exception):
    """Base class for every error raised by podmanager."""


class ConnectivityError(PodManagerError):
    """Target node could not be reached or did not answer in time."""

    def __init__(self, address: str, message: str):
        self.address = address
        super().__init__(f"[{address}] {message}")


class AuthenticationFailed(ConnectivityError):
    """Node is up but rejected the credential while connecting."""

    def __init__(self, address: str, message: str = "invalid password"):
        if "invalid password" not in message:
            message = f"invalid password: {message}"
        super().__init__(address, message)


class ProtocolError(PodManagerError):
    """Node answered but rejected the command or sent a malformed reply."""

    def __init__(self, address: str, message: str):
        self.address = address
        super().__init__(f"[{address}] {message}")


class SemanticMismatch(PodManagerError):
    """Node answered, but the answer contradicts the request."""


class PreconditionError(PodManagerError):
    pass


class CredentialMismatch(PreconditionError):
    def __init__(self, pod_name: str):
        self.pod_name = pod_name
        super().__init__(f"Supplied old password does not match the one on record for pod '{pod_name}'")


class RegistryError(PodManagerError):
    """Replica or sentinel membership could not be enumerated."""


class PodNotFound(RegistryError):
    def __init__(self, pod_name: str):
        self.pod_name = pod_name
        super().__init__(f"Pod '{pod_name}' not found")


class QuorumError(PodManagerError):
    """A fan-out operation did not satisfy its success policy."""

    def __init__(self, message: str, result: "QuorumResult"):
        self.result = result
        super().__init__(message)


class AuthCheckError(PodManagerError):
    def __init__(self, results: dict[str, bool]):
        self.results = results
        failed = sorted(node for node, ok in results.items() if not ok)
        super().__init__(f"At least one node in pod failed auth check: {', '.join(failed)}")


class PrimaryUpdateError(PodManagerError):
    def __init__(self, address: str, message: str):
        self.address = address
        super().__init__(f"Unable to update credential on master {address}: {message}")


class RotationRolledBack(PodManagerError):
    """Replica discovery failed after the master was changed; the master was reverted."""

    def __init__(self, pod_name: str, cause: Exception, revert_errors: Optional[list[str]] = None):
        self.pod_name = pod_name
        self.cause = cause
        self.revert_errors = revert_errors or []
        message = f"Could not fetch replicas for pod '{pod_name}' ({cause}); credential change rolled back"
        if self.revert_errors:
            message += f", but the master revert reported errors: {'; '.join(self.revert_errors)}"
        super().__init__(message)

