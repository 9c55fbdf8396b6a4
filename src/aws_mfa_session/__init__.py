"""AWS MFA Session Tools

This package exchanges a long-lived AWS identity plus an MFA code for
temporary credentials (GetSessionToken or AssumeRole) and saves them to the
AWS credentials file under <profile>_mfa.

Main components:
- profiles: read-only access to ~/.aws/config
- credentials: read/write access to ~/.aws/credentials
- exchange: STS client wrapper
- orchestrator: the end-to-end exchange pipeline
- cli: the ``awsmfa`` command
"""

from .credentials import CredentialStore, TemporaryCredentials
from .errors import (AwsMfaError, ConfigLoadError, ExchangeError,
                     PersistenceError, ValidationError)
from .exchange import TokenExchangeClient
from .orchestrator import ExchangeMode, ExchangeOrchestrator, ExchangeSummary
from .profiles import ProfileMetadata, ProfileStore

__version__ = "1.0.0"
__author__ = "awsmfa Team"

__all__ = [
    "CredentialStore",
    "TemporaryCredentials",
    "ProfileStore",
    "ProfileMetadata",
    "TokenExchangeClient",
    "ExchangeMode",
    "ExchangeOrchestrator",
    "ExchangeSummary",
    "AwsMfaError",
    "ConfigLoadError",
    "ValidationError",
    "ExchangeError",
    "PersistenceError",
]
