"""
Shared test fixtures.
"""

import logging
from datetime import datetime, timezone

import pytest

from aws_mfa_session.credentials import CredentialStore, TemporaryCredentials
from aws_mfa_session.profiles import ProfileStore

ALICE_SERIAL = "arn:aws:iam::111111111111:mfa/alice"
ADMIN_ROLE = "arn:aws:iam::222222222222:role/admin"

# Hand-edited file: comments, compact and spaced keys, no trailing blank line
CREDENTIALS_INI = """# main account
[default]
aws_access_key_id=AKIADEFAULT
aws_secret_access_key=defaultsecret

[work]
; rotated 2024-01
aws_access_key_id = AKIAWORK
aws_secret_access_key = worksecret
"""

CONFIG_INI = f"""[default]
region = us-east-1
mfa_serial = {ALICE_SERIAL}

[profile admin]
role_arn = {ADMIN_ROLE}
source_profile = default
mfa_serial = {ALICE_SERIAL}

[profile norole]
mfa_serial = {ALICE_SERIAL}

[profile noserial]
role_arn = {ADMIN_ROLE}
source_profile = default
"""


@pytest.fixture
def credentials_file(tmp_path):
    path = tmp_path / "credentials"
    path.write_text(CREDENTIALS_INI)
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config"
    path.write_text(CONFIG_INI)
    return path


@pytest.fixture
def profile_store(config_file):
    return ProfileStore(config_file)


@pytest.fixture
def credential_store(credentials_file):
    return CredentialStore(credentials_file)


@pytest.fixture
def temporary_credentials():
    return TemporaryCredentials(
        access_key_id="AKIATEMP",
        secret_access_key="abc",
        session_token="xyz",
        expiration="2024-01-01T00:00:00Z",
    )


@pytest.fixture
def sts_response():
    """Build a boto3-shaped STS response"""
    def _build(access_key_id="AKIATEMP", secret="abc", token="xyz",
               expiration=datetime(2024, 1, 1, tzinfo=timezone.utc)):
        return {
            'Credentials': {
                'AccessKeyId': access_key_id,
                'SecretAccessKey': secret,
                'SessionToken': token,
                'Expiration': expiration,
            }
        }
    return _build


@pytest.fixture(autouse=True)
def reset_logging():
    """The CLI attaches a handler bound to the runner's stderr; drop it after each test."""
    yield
    logging.getLogger('aws_mfa_session').handlers[:] = []
