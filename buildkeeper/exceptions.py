"""This module contains all custom exceptions used by buildkeeper."""

EXIT_MISSING_CAPABILITY = 3
"""Exit status of `upload-logs` when the object storage CLI is unavailable."""


class MissingCapabilityError(RuntimeError):
    """Raised when a required external command is not installed or cannot be invoked."""

    def __init__(self, executable: str, reason: str):
        super().__init__(f"Required command {executable!r} is not available: {reason}")
        self.executable = executable
        self.reason = reason


class GithubAPIError(Exception):
    """Raised when the GitHub API answers with an error payload"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnexpectedResponseError(GithubAPIError):
    """Raised when a GitHub API response does not have the expected shape"""


class InvalidGithubURL(ValueError): ...
