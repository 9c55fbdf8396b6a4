"""
STS token exchange.

Wraps GetSessionToken and AssumeRole behind one result type. Requests are
signed with the long-lived keys of the source profile; the MFA code only
travels as a request parameter.
"""

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .config import DEFAULT_TIMEOUT
from .credentials import TemporaryCredentials
from .errors import ExchangeError

logger = logging.getLogger(__name__)

USER_AGENT_EXTRA = 'awsmfa/1.0'


class TokenExchangeClient:
    def __init__(self, source_profile, region=None, timeout=DEFAULT_TIMEOUT):
        self.source_profile = source_profile
        self.region = region
        self.timeout = timeout
        self._sts = None

    @property
    def sts(self):
        if self._sts is None:
            # MFA codes are single use, so a retried request could never succeed
            boto_config = Config(
                connect_timeout=self.timeout,
                read_timeout=self.timeout,
                retries={'max_attempts': 0},
                user_agent_extra=USER_AGENT_EXTRA,
            )
            try:
                session = boto3.Session(profile_name=self.source_profile,
                                        region_name=self.region)
                self._sts = session.client('sts', config=boto_config)
            except BotoCoreError as e:
                raise ExchangeError(f"Cannot load AWS credentials for profile "
                                    f"'{self.source_profile}': {e}") from e
        return self._sts

    def _call(self, operation, **params):
        logger.debug("Calling sts:%s as %s", operation, self.source_profile)
        try:
            response = getattr(self.sts, operation)(**params)
        except ClientError as e:
            error = e.response.get('Error', {})
            raise ExchangeError(error.get('Message') or str(e), code=error.get('Code')) from e
        except BotoCoreError as e:
            raise ExchangeError(str(e)) from e
        return TemporaryCredentials.from_sts_response(response)

    def get_session_token(self, duration_seconds, mfa_serial, token_code):
        """Get a session token for the source identity itself"""
        return self._call(
            'get_session_token',
            DurationSeconds=duration_seconds,
            SerialNumber=mfa_serial,
            TokenCode=token_code,
        )

    def assume_role(self, duration_seconds, mfa_serial, token_code, role_arn, role_session_name):
        """Assume ``role_arn`` using the source identity plus the MFA code"""
        return self._call(
            'assume_role',
            DurationSeconds=duration_seconds,
            SerialNumber=mfa_serial,
            TokenCode=token_code,
            RoleArn=role_arn,
            RoleSessionName=role_session_name,
        )
