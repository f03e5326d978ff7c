"""
Custom exceptions for the reconciliation engines.

Each exception carries a stable error code and the process exit code
the command surface should terminate with when it reaches the top level.
"""

from typing import Any, Dict


class AppException(Exception):
    """Base application exception."""
    
    def __init__(self, message: str, error_code: str, exit_code: int = 1, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.exit_code = exit_code
        self.details = details or {}
        super().__init__(message)


class AccountNotFoundError(AppException):
    """Raised when the referenced account does not exist."""
    
    def __init__(self, account_id: Any = None):
        message = "Account not found"
        if account_id is not None:
            message = f"Account with ID {account_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            exit_code=0,
            details={"resource": "Account", "id": account_id}
        )


class InvalidModeError(AppException):
    """Raised for an unrecognized reconciliation mode."""
    
    def __init__(self, mode: str, allowed: list[str]):
        super().__init__(
            message=f"Unknown mode: {mode}. Use {', '.join(allowed[:-1])}, or {allowed[-1]}.",
            error_code="ERR_MODE_001",
            exit_code=0,
            details={"mode": mode, "allowed": allowed}
        )


class MissingAccountIdError(AppException):
    """Raised when a mode that needs an account is invoked without one."""
    
    def __init__(self, mode: str):
        super().__init__(
            message=f"--account-id is required for {mode} mode",
            error_code="ERR_CONFIG_001",
            details={"mode": mode}
        )


class ConfigurationError(AppException):
    """Raised for settings the engines cannot honour."""
    
    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_CONFIG_002",
            details=details
        )


class StoreFaultError(AppException):
    """Raised for any failure coming from the underlying store."""
    
    def __init__(self, message: str = "Store operation failed", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_STORE_001",
            details=details
        )


class RepairInvariantError(AppException):
    """Raised when a compensating entry did not bring drift to zero."""
    
    def __init__(self, account_id: int, drift: int):
        super().__init__(
            message=f"Account {account_id} still drifts by {drift} after repair",
            error_code="ERR_RECON_001",
            details={"account_id": account_id, "drift": drift}
        )


class LedgerImmutableError(AppException):
    """Raised on any attempt to update or delete an existing ledger entry."""
    
    def __init__(self, entry_id: Any, operation: str):
        super().__init__(
            message=f"Ledger entries are immutable. Cannot {operation} record id {entry_id}",
            error_code="ERR_LEDGER_001",
            details={"entry_id": entry_id, "operation": operation}
        )
