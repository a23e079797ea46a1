# server/core/errors.py

class TaskValidatorError(Exception):
    """
    Base class for errors surfaced to API callers.
    `status_code` is the HTTP status the gateway answers with.
    """
    status_code = 500
    message = "Internal server error."

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# 4xx: reported to the caller as-is

class AlreadyExists(TaskValidatorError):
    status_code = 400
    message = "User already exists."


class InvalidCredentials(TaskValidatorError):
    status_code = 400
    message = "Invalid credentials."


class Unauthenticated(TaskValidatorError):
    status_code = 401
    message = "Invalid token."


class Expired(TaskValidatorError):
    status_code = 401
    message = "Token has expired. Please log in again."


class Forbidden(TaskValidatorError):
    status_code = 403
    message = "Not allowed to act on this task."


class NotFound(TaskValidatorError):
    status_code = 404
    message = "Not found."


class Empty(TaskValidatorError):
    status_code = 404
    message = "No users found."


class InvalidStatus(TaskValidatorError):
    status_code = 400
    message = "Invalid status."


class UnknownUser(TaskValidatorError):
    status_code = 400
    message = "Unknown user."


class NoFile(TaskValidatorError):
    status_code = 400
    message = "No file uploaded."


# 5xx: detail stays in the server log

class UploadFailed(TaskValidatorError):
    status_code = 500
    message = "Failed to store the uploaded file."


class StoreFailure(TaskValidatorError):
    status_code = 500
    message = "Database operation failed."
