"""
Credential exchange pipeline.

Validates the caller's parameters against the profile metadata, picks the STS
operation, and saves the resulting temporary credentials under
``<profile>_mfa`` in the credentials file.
"""

import enum
import logging

from .config import MIN_DURATION
from .credentials import mfa_section_name
from .errors import PersistenceError, ValidationError
from .exchange import TokenExchangeClient

logger = logging.getLogger(__name__)


class ExchangeMode(enum.Enum):
    SESSION_TOKEN = 'session-token'
    ASSUME_ROLE = 'assume-role'


def role_session_name(profile_name):
    return f"{profile_name}_session_name"


class ExchangeRequest:
    """Everything needed for one STS call"""

    def __init__(self, mode, source_profile, region, duration_seconds, mfa_serial,
                 token_code, role_arn=None, role_session_name=None):
        self.mode = mode
        self.source_profile = source_profile
        self.region = region
        self.duration_seconds = duration_seconds
        self.mfa_serial = mfa_serial
        self.token_code = token_code
        self.role_arn = role_arn
        self.role_session_name = role_session_name

    def __repr__(self):
        # token_code deliberately left out
        return (f"ExchangeRequest(mode={self.mode.value}, source_profile={self.source_profile!r}, "
                f"region={self.region!r}, duration_seconds={self.duration_seconds}, "
                f"mfa_serial={self.mfa_serial!r}, role_arn={self.role_arn!r})")


class ExchangeSummary:
    """Result of a successful exchange, whether or not it reached the disk"""

    def __init__(self, section, credentials, persisted=True, persist_error=None):
        self.section = section
        self.credentials = credentials
        self.persisted = persisted
        self.persist_error = persist_error

    @property
    def expiration(self):
        return self.credentials.expiration

    def redacted(self):
        """Audit-safe view without secret material"""
        return {
            'section': self.section,
            'access_key_id': self.credentials.access_key_id,
            'expiration': self.credentials.expiration,
            'persisted': self.persisted,
        }


class ExchangeOrchestrator:
    def __init__(self, profile_store, credential_store, client_factory=TokenExchangeClient):
        self.profile_store = profile_store
        self.credential_store = credential_store
        # Called as client_factory(source_profile, region)
        self.client_factory = client_factory

    def build_request(self, mode, identity_profile, region, target_profile,
                      duration_seconds, token_code):
        """Validate inputs against the target profile and build the STS request"""
        if (isinstance(duration_seconds, bool) or not isinstance(duration_seconds, int)
                or duration_seconds < MIN_DURATION):
            raise ValidationError(
                f"Duration must be an integer of at least {MIN_DURATION} seconds, got {duration_seconds!r}")
        if not token_code or not str(token_code).strip():
            raise ValidationError("An MFA token code is required")

        metadata = self.profile_store.lookup(target_profile)
        if not metadata.mfa_serial:
            raise ValidationError(
                f"Profile '{target_profile}' has no mfa_serial configured in "
                f"{self.profile_store.config_path}")

        if mode is ExchangeMode.ASSUME_ROLE:
            if not metadata.role_arn:
                raise ValidationError(
                    f"Profile '{target_profile}' has no role_arn configured; "
                    f"use --user to get a session token instead")
            return ExchangeRequest(
                mode=mode,
                source_profile=identity_profile,
                region=None,
                duration_seconds=duration_seconds,
                mfa_serial=metadata.mfa_serial,
                token_code=str(token_code).strip(),
                role_arn=metadata.role_arn,
                role_session_name=role_session_name(target_profile),
            )

        return ExchangeRequest(
            mode=mode,
            source_profile=identity_profile,
            region=region,
            duration_seconds=duration_seconds,
            mfa_serial=metadata.mfa_serial,
            token_code=str(token_code).strip(),
        )

    def exchange(self, request):
        client = self.client_factory(request.source_profile, request.region)
        if request.mode is ExchangeMode.ASSUME_ROLE:
            return client.assume_role(
                request.duration_seconds,
                request.mfa_serial,
                request.token_code,
                request.role_arn,
                request.role_session_name,
            )
        return client.get_session_token(
            request.duration_seconds,
            request.mfa_serial,
            request.token_code,
        )

    def run(self, mode, identity_profile, region, target_profile, duration_seconds, token_code):
        """
        Run one exchange end to end.

        Raises ConfigLoadError, ValidationError or ExchangeError. A failed
        write to disk does not raise: the summary comes back with
        ``persisted=False`` so the credentials can still be shown.
        """
        self.profile_store.load()
        self.credential_store.load()

        request = self.build_request(mode, identity_profile, region, target_profile,
                                     duration_seconds, token_code)
        logger.info("Requesting %s for profile %s using identity %s (%ss)",
                    mode.value, target_profile, identity_profile, duration_seconds)
        if not self.credential_store.has_identity(identity_profile):
            logger.warning("No access keys for '%s' in %s; relying on the SDK credential chain",
                           identity_profile, self.credential_store.credentials_path)

        credentials = self.exchange(request)
        credentials.validate()

        section = mfa_section_name(target_profile)
        self.credential_store.upsert(section, credentials)
        try:
            self.credential_store.persist()
        except PersistenceError as e:
            logger.error("%s", e)
            return ExchangeSummary(section, credentials, persisted=False, persist_error=e)

        logger.info("Saved temporary credentials to [%s], expiring %s", section, credentials.expiration)
        return ExchangeSummary(section, credentials)
