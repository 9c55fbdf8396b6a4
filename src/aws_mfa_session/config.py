"""Runtime settings: file locations, defaults and timeouts."""

import os
from pathlib import Path

DEFAULT_IDENTITY = 'default'
DEFAULT_PROFILE = 'default'
DEFAULT_REGION = 'us-east-1'
DEFAULT_DURATION = 28800  # 8 hours
MIN_DURATION = 900
DEFAULT_TIMEOUT = 30


class Settings:
    def __init__(self, credentials_file=None, config_file=None, timeout=DEFAULT_TIMEOUT):
        self.aws_dir = Path.home() / '.aws'
        # Same precedence as the AWS CLI: explicit path, then env var, then ~/.aws
        self.credentials_file = Path(
            credentials_file
            or os.getenv('AWS_SHARED_CREDENTIALS_FILE')
            or self.aws_dir / 'credentials'
        ).expanduser()
        self.config_file = Path(
            config_file
            or os.getenv('AWS_CONFIG_FILE')
            or self.aws_dir / 'config'
        ).expanduser()
        self.timeout = timeout

    def __repr__(self):
        return (f"Settings(credentials_file={str(self.credentials_file)!r}, "
                f"config_file={str(self.config_file)!r}, timeout={self.timeout})")
