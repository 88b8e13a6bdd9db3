"""``credential_process`` entrypoint for AWS SDKs and the AWS CLI.

Configure a profile with::

    [profile vault]
    credential_process = vault-aws-credentials --role deploy

The command prints one JSON document on stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from vault_aws_credentials import __version__
from vault_aws_credentials.aws_credentials.vault_provider import (
    VaultCredentialError,
    new_vault_provider,
)
from vault_aws_credentials.config import load_settings
from vault_aws_credentials.logging_utils import configure_logging
from vault_aws_credentials.utils.time import parse_duration
from vault_aws_credentials.vault.client import VaultError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vault-aws-credentials",
        description="Print AWS credentials issued by Vault in credential_process format.",
    )
    parser.add_argument("--mount", help="AWS secrets engine mount path (VAULT_AWS_MOUNT_PATH)")
    parser.add_argument("--role", help="Vault role name (VAULT_AWS_ROLE)")
    parser.add_argument("--ttl", help="Requested lease duration, e.g. 30m (VAULT_AWS_TTL)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_USAGE

    configure_logging()

    mount = args.mount or settings.credentials.mount_path
    role = args.role or settings.credentials.role_name
    if not role:
        parser.print_usage(sys.stderr)
        print("error: a role is required (--role or VAULT_AWS_ROLE)", file=sys.stderr)
        return EXIT_USAGE

    lease_duration = None
    if args.ttl:
        try:
            lease_duration = parse_duration(args.ttl)
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return EXIT_USAGE

    try:
        provider = new_vault_provider(
            mount, role, lease_duration=lease_duration, settings=settings
        )
        credentials = provider.retrieve()
    except (VaultError, VaultCredentialError) as exc:
        logger.error("Failed to obtain AWS credentials from Vault: %s (%s)", exc, exc.code)
        return EXIT_FAILURE

    document = {
        "Version": 1,
        "AccessKeyId": credentials.access_key_id,
        "SecretAccessKey": credentials.secret_access_key,
        "SessionToken": credentials.session_token,
        "Expiration": provider.expires_at.isoformat(),
    }
    sys.stdout.write(json.dumps(document) + "\n")
    return EXIT_OK


def run_entrypoint() -> None:
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover
    run_entrypoint()
