"""
CLI entry point for security policy administration.

Usage:
    # Show the resolved policy, rendered header and relevant env vars
    python -m headerguard.cli show

    # Switch the .env file to development mode (report-only, no HSTS)
    python -m headerguard.cli toggle dev

    # Switch to production mode (enforcing, HSTS on)
    python -m headerguard.cli toggle production --env-file /srv/app/.env
"""

import argparse
import logging
import os
import re
import sys
from pathlib import Path

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

MODES = {
    "dev": "development",
    "development": "development",
    "prod": "production",
    "production": "production",
}

MODE_VARIABLES = {
    "development": {
        "CSP_ENABLED": "true",
        "CSP_REPORT_ONLY": "true",
        "HSTS_ENABLED": "false",
    },
    "production": {
        "CSP_ENABLED": "true",
        "CSP_REPORT_ONLY": "false",
        "HSTS_ENABLED": "true",
    },
}

SHOWN_ENV_VARS = (
    "CSP_ENABLED",
    "CSP_REPORT_ONLY",
    "CSP_REPORT_URI",
    "CSP_REPORT_TO",
    "CSP_NONCE_ENABLED",
    "HSTS_ENABLED",
    "DEBUG",
)


def update_env_file(path: Path, variables: dict[str, str]) -> str:
    """Set KEY=value lines in an env file, appending keys that are missing.

    Returns:
        The new file content.
    """
    content = path.read_text(encoding="utf-8")
    for key, value in variables.items():
        pattern = re.compile(rf"^{re.escape(key)}=.*$", re.MULTILINE)
        line = f"{key}={value}"
        if pattern.search(content):
            content = pattern.sub(line, content)
        else:
            if content and not content.endswith("\n"):
                content += "\n"
            content += line + "\n"
    path.write_text(content, encoding="utf-8")
    return content


def cmd_show(args: argparse.Namespace) -> int:
    """Log the resolved policy the application would serve."""
    from headerguard.core.config import Settings
    from headerguard.domain.security.csp_builder import (
        build_csp_header,
        build_hsts_header,
        csp_header_name,
    )
    from headerguard.infrastructure.security.policy_store import PolicyStore

    config = PolicyStore.from_settings(Settings(_env_file=args.env_file)).get()

    logger.info("CSP enabled: %s", "YES" if config.enabled else "NO")
    if not config.enabled:
        logger.warning("CSP is disabled. Set CSP_ENABLED=true to enable it.")
        return 1

    logger.info(
        "Report only: %s",
        "YES (violations reported, not blocked)" if config.report_only else "NO (violations blocked)",
    )
    for directive, sources in config.directives.items():
        logger.info("%-20s: %s", directive, " ".join(sources) or "(empty, skipped)")

    logger.info("%s: %s", csp_header_name(config), build_csp_header(config))
    for header_name, value in config.aux_headers.items():
        logger.info("%s: %s", header_name, value)
    if config.hsts.enabled:
        logger.info("Strict-Transport-Security (HTTPS only): %s", build_hsts_header(config.hsts))

    for name in SHOWN_ENV_VARS:
        logger.info("env %s=%s", name, os.environ.get(name, "not set"))
    return 0


def cmd_toggle(args: argparse.Namespace) -> int:
    """Rewrite the env file for development or production mode."""
    mode = MODES.get(args.mode.lower())
    if mode is None:
        logger.error('Invalid mode. Use "dev", "development", "prod", or "production".')
        return 1

    env_path = Path(args.env_file)
    if not env_path.is_file():
        logger.error("%s not found", env_path)
        return 1

    update_env_file(env_path, MODE_VARIABLES[mode])
    if mode == "development":
        logger.info("CSP set to development mode: report-only, HSTS disabled")
    else:
        logger.info("CSP set to production mode: enforcing, HSTS enabled")
        logger.warning("HSTS requires HTTPS; test thoroughly before deploying")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and dispatch to a subcommand."""
    parser = argparse.ArgumentParser(
        prog="headerguard",
        description="Inspect and toggle the security header policy.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    show_parser = subparsers.add_parser("show", help="Show the resolved policy")
    show_parser.add_argument("--env-file", default=".env", help="Env file to read")
    show_parser.set_defaults(func=cmd_show)

    toggle_parser = subparsers.add_parser(
        "toggle", help="Switch between development and production modes"
    )
    toggle_parser.add_argument("mode", help="dev/development or prod/production")
    toggle_parser.add_argument("--env-file", default=".env", help="Env file to rewrite")
    toggle_parser.set_defaults(func=cmd_toggle)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
