"""
AWS credentials file access (~/.aws/credentials).

Holds the long-lived identities used to sign STS requests and the derived
``<profile>_mfa`` sections this tool writes.
"""

import configparser
import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from .errors import ConfigLoadError, ExchangeError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

MFA_SECTION_SUFFIX = '_mfa'


def mfa_section_name(profile_name):
    """Name of the credentials section temporary credentials are saved under"""
    return f"{profile_name}{MFA_SECTION_SUFFIX}"


def format_expiration(value):
    """Render an expiration as an RFC3339 timestamp.

    ``datetime`` values (what boto3 returns) are converted to UTC; strings are
    checked for parseability and kept as-is.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')

    parse_expiration(value)
    return value


def parse_expiration(value):
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f"Invalid expiration timestamp: {value!r}")


class TemporaryCredentials:
    """Access key, secret key, session token and expiration from STS."""

    def __init__(self, access_key_id, secret_access_key, session_token, expiration):
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.session_token = session_token
        self.expiration = expiration

    @classmethod
    def from_sts_response(cls, response):
        """Normalize the ``Credentials`` block of a GetSessionToken/AssumeRole response

        A malformed response is a remote-side problem and raises ExchangeError.
        """
        try:
            credentials = response['Credentials']
            record = cls(
                access_key_id=credentials['AccessKeyId'],
                secret_access_key=credentials['SecretAccessKey'],
                session_token=credentials['SessionToken'],
                expiration=format_expiration(credentials['Expiration']),
            )
            record.validate()
        except KeyError as e:
            raise ExchangeError(f"STS response is missing field {e}") from e
        except ValidationError as e:
            raise ExchangeError(f"STS returned unusable credentials: {e}") from e
        return record

    def validate(self):
        missing = [field for field in ('access_key_id', 'secret_access_key',
                                       'session_token', 'expiration')
                   if not getattr(self, field)]
        if missing:
            raise ValidationError(f"Temporary credentials are incomplete: missing {', '.join(missing)}")
        parse_expiration(self.expiration)

    def as_section(self):
        return {
            'aws_access_key_id': self.access_key_id,
            'aws_secret_access_key': self.secret_access_key,
            'aws_session_token': self.session_token,
            'expiration': self.expiration,
        }

    def __eq__(self, other):
        if not isinstance(other, TemporaryCredentials):
            return NotImplemented
        return self.as_section() == other.as_section()

    def __repr__(self):
        return (f"TemporaryCredentials(access_key_id={self.access_key_id!r}, "
                f"expiration={self.expiration!r})")


# Same header pattern configparser uses
SECTION_HEADER = re.compile(r'\[(?P<header>.+)\]')
COMMENT_PREFIXES = ('#', ';')


def _header_of(line):
    match = SECTION_HEADER.match(line.strip())
    return match.group('header') if match else None


def _render_section(section_name, values):
    return [f"[{section_name}]\n"] + [f"{key} = {value}\n" for key, value in values.items()]


def splice_section(text, section_name, values):
    """
    Return ``text`` with ``section_name`` replaced by ``values``.

    Only the lines of that section change: every other line, including
    comments and spacing, comes back as it was. A missing section is
    appended at the end of the file.
    """
    lines = text.splitlines(keepends=True)
    start = next((i for i, line in enumerate(lines) if _header_of(line) == section_name), None)

    if start is None:
        if lines and not lines[-1].endswith('\n'):
            lines[-1] += '\n'
        if lines and lines[-1].strip():
            lines.append('\n')
        return ''.join(lines + _render_section(section_name, values))

    end = next((i for i in range(start + 1, len(lines)) if _header_of(lines[i]) is not None),
               len(lines))
    # Blank lines and comments right before the next header belong to it
    while end > start + 1:
        stripped = lines[end - 1].strip()
        if stripped and not stripped.startswith(COMMENT_PREFIXES):
            break
        end -= 1

    return ''.join(lines[:start] + _render_section(section_name, values) + lines[end:])


class CredentialStore:
    def __init__(self, credentials_path):
        self.credentials_path = Path(credentials_path)
        self._config = None
        self._text = None
        self._pending = {}

    @property
    def loaded(self):
        return self._config is not None

    def load(self):
        """Parse the credentials file; later calls are no-ops."""
        if self._config is not None:
            return self

        if not self.credentials_path.exists():
            raise ConfigLoadError(self.credentials_path, "file not found")

        config = configparser.ConfigParser(interpolation=None)
        config.optionxform = str
        try:
            with open(self.credentials_path, 'r', encoding='utf-8') as f:
                text = f.read()
            config.read_string(text, source=str(self.credentials_path))
        except (configparser.Error, OSError, UnicodeDecodeError) as e:
            raise ConfigLoadError(self.credentials_path, e) from e

        logger.debug("Loaded %d sections from %s", len(config.sections()), self.credentials_path)
        self._config = config
        self._text = text
        return self

    def _require_loaded(self):
        if self._config is None:
            raise RuntimeError("CredentialStore.load() must be called first")
        return self._config

    def has_identity(self, profile_name):
        """Whether a long-lived key pair is stored for ``profile_name``"""
        config = self._require_loaded()
        return (config.has_section(profile_name)
                and bool(config.get(profile_name, 'aws_access_key_id', fallback=''))
                and bool(config.get(profile_name, 'aws_secret_access_key', fallback='')))

    def get_section(self, section_name):
        config = self._require_loaded()
        if not config.has_section(section_name):
            return None
        return dict(config[section_name])

    def get_credentials(self, section_name):
        """Read back a previously saved ``<profile>_mfa`` section"""
        values = self.get_section(section_name)
        if values is None:
            return None
        return TemporaryCredentials(
            access_key_id=values.get('aws_access_key_id', ''),
            secret_access_key=values.get('aws_secret_access_key', ''),
            session_token=values.get('aws_session_token', ''),
            expiration=values.get('expiration', ''),
        )

    def upsert(self, section_name, credentials):
        """
        Replace ``section_name`` with the four temporary credential fields.

        The record is validated before anything is touched. An existing
        section keeps its position in the file but loses any other keys.
        """
        config = self._require_loaded()
        credentials.validate()

        values = credentials.as_section()
        # ConfigParser.__setitem__ clears an existing section in place
        config[section_name] = values
        self._pending[section_name] = values
        logger.debug("Updated section [%s] (expires %s)", section_name, credentials.expiration)

    def render(self):
        """File contents with all pending sections spliced into the original text"""
        self._require_loaded()
        text = self._text
        for section_name, values in self._pending.items():
            text = splice_section(text, section_name, values)
        return text

    def persist(self):
        """Write the store back to disk through a temp file and an atomic rename"""
        text = self.render()
        # Write through symlinks (dotfile managers) instead of replacing them
        target = self.credentials_path.resolve()

        try:
            fd, tmp_name = tempfile.mkstemp(dir=str(target.parent),
                                            prefix=f".{target.name}.", suffix='.tmp')
        except OSError as e:
            raise PersistenceError(target, e) from e

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(text)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, str(target))
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise PersistenceError(target, e) from e

        self._text = text
        self._pending.clear()
        logger.debug("Saved credentials file %s", target)
