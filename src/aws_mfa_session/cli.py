#!/usr/bin/env python3
"""
awsmfa CLI
Gets a session token or assumes a role with an MFA code and saves the
temporary credentials to the AWS credentials file as <profile>_mfa.
"""

import logging
import sys
from datetime import datetime

import click

from . import config as defaults
from .config import Settings
from .credentials import CredentialStore, mfa_section_name, parse_expiration
from .errors import AwsMfaError
from .exchange import TokenExchangeClient
from .orchestrator import ExchangeMode, ExchangeOrchestrator
from .output import EXPECTED_FORMATS, POSIX, WINDOWS, render_env_exports, render_header, render_summary
from .profiles import ProfileStore

TITLE = 'awsmfa'
DESCRIPTION = 'Get Session Token or Assume Role with MFA'


def setup_logging(debug=False):
    """Log to stderr; DEBUG with --debug, warnings only otherwise."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(levelname)s: %(name)s: %(message)s'))
    root = logging.getLogger('aws_mfa_session')
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if debug else logging.WARNING)


def show_banner():
    click.secho(render_header(TITLE, DESCRIPTION, datetime.now().strftime('%Y-%m-%d %H:%M:%S')),
                fg='cyan', bold=True)
    click.secho("This script expects the AWS config and credentials\n"
                "file to be configured in this example format:\n", fg='red', bold=True)
    click.secho("~/.aws/credentials:", fg='yellow', bold=True)
    click.echo(EXPECTED_FORMATS['credentials'] + "\n")
    click.secho("~/.aws/config:", fg='yellow', bold=True)
    click.echo(EXPECTED_FORMATS['config'] + "\n")


def _non_empty(value):
    value = value.strip()
    if not value:
        raise click.UsageError("Please enter a valid token code")
    return value


def show_result(summary, shell):
    click.secho(render_summary(summary), fg='cyan', bold=True)
    click.echo()
    click.secho(render_env_exports(shell, summary.section, summary.credentials), fg='green')
    click.echo()
    if not summary.persisted:
        click.secho(f"⚠️  {summary.persist_error}", fg='red', bold=True, err=True)
        click.secho("   The credentials above are still valid for this shell session.", fg='red', err=True)
    click.secho("Done!", fg='green', bold=True)


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging on stderr')
@click.option('--credentials-file', type=click.Path(dir_okay=False),
              help='AWS credentials file (default: $AWS_SHARED_CREDENTIALS_FILE or ~/.aws/credentials)')
@click.option('--config-file', type=click.Path(dir_okay=False),
              help='AWS config file (default: $AWS_CONFIG_FILE or ~/.aws/config)')
@click.option('--timeout', default=defaults.DEFAULT_TIMEOUT, show_default=True,
              help='STS connect/read timeout in seconds')
@click.pass_context
def cli(ctx, debug, credentials_file, config_file, timeout):
    """awsmfa - Get Session Token or Assume Role with MFA

    Temporary credentials are saved to the AWS credentials file under
    <profile>_mfa so the AWS CLI and SDKs can use them with --profile.
    """
    setup_logging(debug)
    ctx.obj = Settings(credentials_file=credentials_file, config_file=config_file, timeout=timeout)


@cli.command()
@click.option('--user', '-u', is_flag=True,
              help='Get a session token for the user instead of assuming the profile role')
@click.option('--identity', help='Credentials section used to sign the request (default: default)')
@click.option('--profile', help='Config profile holding mfa_serial/role_arn (default: default)')
@click.option('--region', help='AWS region for the session token call (default: us-east-1)')
@click.option('--duration', type=int, help='Token duration in seconds (default: 28800, minimum: 900)')
@click.option('--token-code', '-t', help='MFA token code (will prompt if not provided)')
@click.option('--shell', type=click.Choice([POSIX, WINDOWS]),
              help='Flavour of the environment variable snippet (default: detected from the OS)')
@click.option('--no-banner', is_flag=True, help='Skip the header and file format help')
@click.pass_obj
def login(settings, user, identity, profile, region, duration, token_code, shell, no_banner):
    """Exchange an MFA code for temporary credentials"""
    if not no_banner:
        show_banner()

    if user:
        mode = ExchangeMode.SESSION_TOKEN
        click.secho("Using the get_session_token user flag", fg='green', bold=True)
    else:
        mode = ExchangeMode.ASSUME_ROLE
        click.secho("Not using the user flag - proceeding with role assumption", fg='yellow', bold=True)

    if identity is None:
        identity = click.prompt('Enter AWS Credentials', default=defaults.DEFAULT_IDENTITY)
    if profile is None:
        label = 'Enter profile name to get session token' if user \
            else 'Enter profile name for role assumption'
        profile = click.prompt(label, default=defaults.DEFAULT_PROFILE)
    if region is None and mode is ExchangeMode.SESSION_TOKEN:
        region = click.prompt('Enter AWS Region', default=defaults.DEFAULT_REGION)
    if duration is None:
        duration = click.prompt('Enter Duration (s)', default=defaults.DEFAULT_DURATION,
                                type=click.IntRange(min=defaults.MIN_DURATION))
    if token_code is None:
        token_code = click.prompt('Enter MFA Token', value_proc=_non_empty)

    orchestrator = ExchangeOrchestrator(
        ProfileStore(settings.config_file),
        CredentialStore(settings.credentials_file),
        client_factory=lambda source, reg: TokenExchangeClient(source, reg, timeout=settings.timeout),
    )

    try:
        summary = orchestrator.run(mode, identity, region, profile, duration, token_code)
    except AwsMfaError as e:
        click.secho(f"❌ {type(e).__name__}: {e}", fg='red', bold=True, err=True)
        sys.exit(e.exit_code)

    show_result(summary, shell)


@cli.command()
@click.option('--profile', default=defaults.DEFAULT_PROFILE, show_default=True,
              help='Profile whose saved _mfa credentials to inspect')
@click.pass_obj
def status(settings, profile):
    """Show where files are read from and when saved credentials expire"""
    click.echo("📋 Current Configuration:")
    click.echo(f"  credentials_file: {settings.credentials_file}")
    click.echo(f"  config_file: {settings.config_file}")

    store = CredentialStore(settings.credentials_file)
    try:
        store.load()
    except AwsMfaError as e:
        click.secho(f"\n❌ {e}", fg='red', err=True)
        sys.exit(e.exit_code)

    section = mfa_section_name(profile)
    saved = store.get_credentials(section)
    if saved is None:
        click.echo(f"\n❌ No temporary credentials saved under [{section}]")
        return

    try:
        expiration = parse_expiration(saved.expiration)
    except AwsMfaError:
        click.echo(f"\n⚠️  [{section}] has an unreadable expiration: {saved.expiration!r}")
        return

    state = "expired" if expiration <= datetime.now(expiration.tzinfo) else "valid"
    click.echo(f"\n🕒 [{section}] expires at {saved.expiration} ({state})")


if __name__ == '__main__':
    cli()
