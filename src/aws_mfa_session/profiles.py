"""
Read-only access to the AWS config file (~/.aws/config).

Profiles live in ``[profile <name>]`` sections; the default profile may also
be written as a bare ``[default]`` section.
"""

import configparser
import logging
from pathlib import Path
from typing import Optional

from .errors import ConfigLoadError

logger = logging.getLogger(__name__)


class ProfileMetadata:
    """MFA and role settings of a single profile."""
    def __init__(self, name: str, mfa_serial: str = '', role_arn: Optional[str] = None,
                 source_profile: Optional[str] = None, region: Optional[str] = None):
        self.name = name
        self.mfa_serial = mfa_serial
        self.role_arn = role_arn
        self.source_profile = source_profile
        self.region = region

    def __repr__(self) -> str:
        return (f"ProfileMetadata(name={self.name!r}, mfa_serial={self.mfa_serial!r}, "
                f"role_arn={self.role_arn!r}, source_profile={self.source_profile!r})")


class ProfileStore:
    def __init__(self, config_path):
        self.config_path = Path(config_path)
        self._config = None

    def load(self) -> 'ProfileStore':
        """Parse the config file once; later calls are no-ops."""
        if self._config is not None:
            return self

        if not self.config_path.exists():
            raise ConfigLoadError(self.config_path, "file not found")

        config = configparser.ConfigParser(interpolation=None)
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config.read_file(f)
        except (configparser.Error, OSError, UnicodeDecodeError) as e:
            raise ConfigLoadError(self.config_path, e) from e

        logger.debug("Loaded %d sections from %s", len(config.sections()), self.config_path)
        self._config = config
        return self

    def _section_for(self, profile_name: str) -> Optional[str]:
        section = f"profile {profile_name}"
        if self._config.has_section(section):
            return section
        if profile_name == 'default' and self._config.has_section('default'):
            return 'default'
        return None

    def lookup(self, profile_name: str) -> ProfileMetadata:
        """
        Get the metadata for a profile.

        Unknown profiles and profiles without ``mfa_serial`` come back with an
        empty serial; callers decide whether that is acceptable.
        """
        self.load()

        section = self._section_for(profile_name)
        if section is None:
            logger.debug("No config section for profile %s", profile_name)
            return ProfileMetadata(profile_name)

        values = self._config[section]
        return ProfileMetadata(
            name=profile_name,
            mfa_serial=values.get('mfa_serial', '').strip(),
            role_arn=values.get('role_arn', '').strip() or None,
            source_profile=values.get('source_profile', '').strip() or None,
            region=values.get('region', '').strip() or None,
        )
