"""
Domain exceptions raised by services and routes.

Each carries the HTTP status the app-level error handlers answer with.
"""


class ClassroomHubError(Exception):
    status_code = 500
    message = 'Operation failed'

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self):
        return {
            'success': False,
            'error': self.message,
            'details': self.details,
        }


class ValidationError(ClassroomHubError):
    status_code = 400
    message = 'Invalid request'


class AuthorizationError(ClassroomHubError):
    status_code = 403
    message = 'You are not authorized to perform this action'


class NotFoundError(ClassroomHubError):
    status_code = 404
    message = 'Not found'


class BatchWriteError(ClassroomHubError):
    """A chunk of a batched write failed after earlier chunks committed."""
    status_code = 500
    message = 'Failed to update batch attendance'

    def __init__(self, failed_chunk, committed, cause):
        super().__init__(details=str(cause))
        self.failed_chunk = failed_chunk
        self.committed = committed
        self.cause = cause

    def to_dict(self):
        body = super().to_dict()
        body['failedChunk'] = self.failed_chunk
        body['committedChunks'] = len(self.committed)
        return body


class ChunkTimeoutError(ClassroomHubError):
    """A chunk's transaction ran past its time budget before committing."""
    status_code = 504
    message = 'Chunk exceeded its time budget'
