"""Text rendering for the end-of-run summary. Pure functions, no I/O."""

import os

POSIX = 'posix'
WINDOWS = 'windows'

RULE = '-' * 76

POSIX_TEMPLATE = """export AWS_PROFILE={profile}
unset AWS_SESSION_TOKEN
unset AWS_ACCESS_KEY_ID
unset AWS_SECRET_ACCESS_KEY
AWS_SESSION_TOKEN={session_token}
AWS_ACCESS_KEY_ID={access_key_id}
AWS_SECRET_ACCESS_KEY={secret_access_key}
export AWS_SESSION_TOKEN AWS_ACCESS_KEY_ID AWS_SECRET_ACCESS_KEY"""

WINDOWS_TEMPLATE = """# Windows Command Prompt:
setx AWS_PROFILE {profile}
setx AWS_SESSION_TOKEN {session_token}
setx AWS_ACCESS_KEY_ID {access_key_id}
setx AWS_SECRET_ACCESS_KEY {secret_access_key}

# Windows PowerShell:
$Env:AWS_SESSION_TOKEN="{session_token}"
$Env:AWS_ACCESS_KEY_ID="{access_key_id}"
$Env:AWS_SECRET_ACCESS_KEY="{secret_access_key}"
""".rstrip('\n')


def shell_for(os_name=None):
    """Map an ``os.name``/platform string to the snippet flavour"""
    if os_name is None:
        os_name = os.name
    return WINDOWS if os_name.lower() in ('nt', 'windows', 'win32') else POSIX


def render_env_exports(os_name, section, credentials):
    template = WINDOWS_TEMPLATE if shell_for(os_name) == WINDOWS else POSIX_TEMPLATE
    return template.format(
        profile=section,
        session_token=credentials.session_token,
        access_key_id=credentials.access_key_id,
        secret_access_key=credentials.secret_access_key,
    )


def render_summary(summary):
    if summary.persisted:
        saved = f"Temporary Creds for Profile {summary.section} are saved to AWS Credentials File"
    else:
        saved = f"Temporary Creds for Profile {summary.section} could NOT be saved to AWS Credentials File"
    return "\n".join([
        RULE,
        saved,
        f"Expiration: {summary.expiration}",
        "Environment Variables: If you want to use ENV variables instead, export",
        "as per below (copy & paste in shell)",
        RULE,
    ])


def render_header(title, description, date):
    rule = '-' * 62
    return "\n".join([
        rule,
        f"Script: {title}",
        f"Description: {description}",
        f"Date: {date}",
        rule,
    ])


EXPECTED_FORMATS = {
    'credentials': """[default]
aws_access_key_id = AKXXXXXXXXXXXXXXXXXXXXX
aws_secret_access_key = XXXXXXXXXXXXXXXXXXXXXXXXX""",
    'config': """[profile myprofile]
mfa_serial = arn:aws:iam::AccountNumber:mfa/username

[profile myotherprofile]
role_arn = arn:aws:iam::1234567890:role/myrole
source_profile = default
mfa_serial = arn:aws:iam::AnotherAccountNumber:mfa/username""",
}
