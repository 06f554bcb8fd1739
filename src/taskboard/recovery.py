class TaskboardError(Exception):
    """Base exception for all taskboard errors."""
    pass

class RecoverableError(TaskboardError):
    """An error that can be recovered from without data loss."""
    pass

class FatalError(TaskboardError):
    """An error that requires application termination or major intervention."""
    pass

class CorruptionError(FatalError):
    """Corrupted Data Error - from syntax errors in the board file, to just unknown data"""
    pass

class FileOperationError(RecoverableError):
    """File operation failed but can be retried."""
    pass

class MigrationNeededError(RecoverableError):
    """ Data is valid, but was written by an older schema """
    pass

class NotFoundError(RecoverableError):
    """Referenced task or project does not exist."""
    pass

class AuthorizationError(RecoverableError):
    """Caller is neither owner nor member of the project."""
    pass

class TaskValidationError(RecoverableError):
    """Request rejected before any mutation was attempted."""
    pass
