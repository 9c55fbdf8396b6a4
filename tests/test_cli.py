"""
Tests for the awsmfa command line.
"""

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from aws_mfa_session.cli import cli
from aws_mfa_session.credentials import CredentialStore
from aws_mfa_session.errors import ExchangeError
from conftest import ALICE_SERIAL, CREDENTIALS_INI


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_client(temporary_credentials):
    with patch('aws_mfa_session.cli.TokenExchangeClient') as client_cls:
        client = MagicMock()
        client.get_session_token.return_value = temporary_credentials
        client.assume_role.return_value = temporary_credentials
        client_cls.return_value = client
        yield client_cls, client


def _base_args(credentials_file, config_file):
    return ['--credentials-file', str(credentials_file), '--config-file', str(config_file)]


def test_login_session_token(runner, mock_client, credentials_file, config_file):
    client_cls, client = mock_client

    result = runner.invoke(cli, _base_args(credentials_file, config_file) + [
        'login', '-u', '--identity', 'default', '--profile', 'default', '--region', 'us-east-1',
        '--duration', '3600', '--token-code', '123456', '--shell', 'posix', '--no-banner',
    ])

    assert result.exit_code == 0, result.output
    client_cls.assert_called_once_with('default', 'us-east-1', timeout=30)
    client.get_session_token.assert_called_once_with(3600, ALICE_SERIAL, '123456')
    assert "Temporary Creds for Profile default_mfa are saved" in result.output
    assert "export AWS_PROFILE=default_mfa" in result.output
    assert "Done!" in result.output
    saved = CredentialStore(credentials_file).load().get_section('default_mfa')
    assert saved['aws_session_token'] == 'xyz'


def test_login_assume_role_windows(runner, mock_client, credentials_file, config_file):
    _, client = mock_client

    result = runner.invoke(cli, _base_args(credentials_file, config_file) + [
        'login', '--identity', 'default', '--profile', 'admin', '--duration', '3600',
        '--token-code', '123456', '--shell', 'windows', '--no-banner',
    ])

    assert result.exit_code == 0, result.output
    assert client.assume_role.call_args[0][4] == 'admin_session_name'
    assert "setx AWS_PROFILE admin_mfa" in result.output


def test_login_prompts(runner, mock_client, credentials_file, config_file):
    """Defaults are offered, bad durations and empty codes are asked again."""
    _, client = mock_client

    result = runner.invoke(
        cli, _base_args(credentials_file, config_file) + ['login', '-u', '--shell', 'posix'],
        input="\n\n\n500\nabc\n3600\n\n123456\n",
    )

    assert result.exit_code == 0, result.output
    assert "Script: awsmfa" in result.output
    client.get_session_token.assert_called_once_with(3600, ALICE_SERIAL, '123456')


def test_login_missing_mfa_serial(runner, mock_client, credentials_file, config_file):
    client_cls, _ = mock_client

    result = runner.invoke(cli, _base_args(credentials_file, config_file) + [
        'login', '--identity', 'default', '--profile', 'noserial', '--duration', '3600',
        '--token-code', '123456', '--no-banner',
    ])

    assert result.exit_code == 3
    assert "mfa_serial" in result.output
    client_cls.assert_not_called()
    assert credentials_file.read_text() == CREDENTIALS_INI


def test_login_duration_below_minimum(runner, mock_client, credentials_file, config_file):
    client_cls, _ = mock_client

    result = runner.invoke(cli, _base_args(credentials_file, config_file) + [
        'login', '-u', '--identity', 'default', '--profile', 'default', '--region', 'us-east-1',
        '--duration', '500', '--token-code', '123456', '--no-banner',
    ])

    assert result.exit_code == 3
    client_cls.assert_not_called()


def test_login_exchange_error(runner, mock_client, credentials_file, config_file):
    _, client = mock_client
    client.get_session_token.side_effect = ExchangeError(
        "MultiFactorAuthentication failed with invalid MFA one time pass code.", code="AccessDenied")

    result = runner.invoke(cli, _base_args(credentials_file, config_file) + [
        'login', '-u', '--identity', 'default', '--profile', 'default', '--region', 'us-east-1',
        '--duration', '3600', '--token-code', '000000', '--no-banner',
    ])

    assert result.exit_code == 1
    assert "MultiFactorAuthentication failed with invalid MFA one time pass code." in result.output


def test_login_missing_config_file(runner, mock_client, credentials_file, tmp_path):
    result = runner.invoke(cli, _base_args(credentials_file, tmp_path / "missing") + [
        'login', '-u', '--identity', 'default', '--profile', 'default', '--region', 'us-east-1',
        '--duration', '3600', '--token-code', '123456', '--no-banner',
    ])

    assert result.exit_code == 2
    assert "ConfigLoadError" in result.output


def test_login_persist_failure_is_a_warning(runner, mock_client, credentials_file, config_file):
    with patch('aws_mfa_session.credentials.os.replace', side_effect=OSError("read-only file system")):
        result = runner.invoke(cli, _base_args(credentials_file, config_file) + [
            'login', '-u', '--identity', 'default', '--profile', 'default', '--region', 'us-east-1',
            '--duration', '3600', '--token-code', '123456', '--shell', 'posix', '--no-banner',
        ])

    assert result.exit_code == 0, result.output
    assert "could NOT be saved" in result.output
    assert "AWS_SESSION_TOKEN=xyz" in result.output
    assert "read-only file system" in result.output
    assert credentials_file.read_text() == CREDENTIALS_INI


def test_status(runner, credentials_file, config_file):
    credentials_file.write_text(CREDENTIALS_INI + "[work_mfa]\naws_access_key_id = A\n"
                                "aws_secret_access_key = B\naws_session_token = C\n"
                                "expiration = 2024-01-01T00:00:00Z\n")

    result = runner.invoke(cli, _base_args(credentials_file, config_file) + ['status', '--profile', 'work'])

    assert result.exit_code == 0, result.output
    assert "[work_mfa] expires at 2024-01-01T00:00:00Z (expired)" in result.output


def test_status_nothing_saved(runner, credentials_file, config_file):
    result = runner.invoke(cli, _base_args(credentials_file, config_file) + ['status'])

    assert result.exit_code == 0
    assert "No temporary credentials saved under [default_mfa]" in result.output


def test_env_var_paths(runner, mock_client, credentials_file, config_file, monkeypatch):
    monkeypatch.setenv('AWS_SHARED_CREDENTIALS_FILE', str(credentials_file))
    monkeypatch.setenv('AWS_CONFIG_FILE', str(config_file))

    result = runner.invoke(cli, [
        'login', '-u', '--identity', 'default', '--profile', 'default', '--region', 'us-east-1',
        '--duration', '3600', '--token-code', '123456', '--no-banner',
    ])

    assert result.exit_code == 0, result.output
    assert CredentialStore(credentials_file).load().get_section('default_mfa') is not None
