class GameError(Exception):
    """Base for errors that map onto an HTTP status and a JSON error body."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message}


class ValidationError(GameError):
    status_code = 400


class NotFoundError(GameError):
    status_code = 404


class StorageError(GameError):
    status_code = 500


class ConflictError(StorageError):
    """A conditional write kept losing against concurrent writers."""

    status_code = 409
