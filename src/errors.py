"""Exception types for requests rejected outright (no fallback output)."""

from error_ledger import ErrorCode


class AccessControlError(RuntimeError):
    """Base error for rejected access-control operations."""

    code = None

    def __init__(self, message, caller=None):
        super().__init__(message)
        self.caller = caller


class OrchestratorNotConfiguredError(AccessControlError):
    code = ErrorCode.ORCHESTRATOR_NOT_CONFIGURED


class UnauthorizedCallerError(AccessControlError):
    code = ErrorCode.UNAUTHORIZED_CALLER


class OrchestratorAlreadyConfiguredError(AccessControlError):
    code = ErrorCode.ORCHESTRATOR_ALREADY_CONFIGURED


class InvalidOrchestratorAddressError(AccessControlError):
    code = ErrorCode.INVALID_ORCHESTRATOR_ADDRESS


class NotOwnerError(AccessControlError):
    """Raised when someone other than the deployment owner tries to configure."""
