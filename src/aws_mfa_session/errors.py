"""Exception types raised by the MFA credential pipeline.

Each class carries the process exit status the CLI uses for it, so scripted
callers can tell a broken local config apart from a rejected MFA code.
"""


class AwsMfaError(Exception):
    """Base class for all awsmfa errors"""

    exit_code = 1


class ConfigLoadError(AwsMfaError):
    """The AWS config or credentials file is missing or cannot be parsed"""

    exit_code = 2

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load {path}: {reason}")


class ValidationError(AwsMfaError):
    """Caller input or profile metadata is unusable"""

    exit_code = 3


class ExchangeError(AwsMfaError):
    """STS rejected the request or could not be reached"""

    exit_code = 1

    def __init__(self, message, code=None):
        self.code = code
        super().__init__(message)


class PersistenceError(AwsMfaError):
    """The credentials file could not be written back to disk"""

    exit_code = 4

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save to credentials file {path}: {reason}")
