"""Terminal front-end for the sign-in form."""

from __future__ import annotations

import argparse
import asyncio
import getpass
from collections.abc import Callable, Sequence

from signin.client import AuthSubmitter, DemoAuthSubmitter, HttpAuthSubmitter
from signin.config import Settings, configure_structlog, get_settings
from signin.controller import FormController
from signin.validation import FIELD_NAMES

Prompt = Callable[[str], str]


async def _run_sign_in(
    controller: FormController,
    *,
    email: str | None,
    attempts: int,
    read_email: Prompt,
    read_password: Prompt,
) -> int:
    """Prompt, validate and submit until success or the attempt budget runs out."""
    submissions = 0
    while submissions < attempts:
        state = controller.state
        if email is not None and not state.values["email"]:
            controller.on_field_change("email", email)
        elif not state.values["email"] or state.error_for("email") is not None:
            controller.on_field_change("email", read_email("Email Address: "))
        controller.on_field_change("password", read_password("Password: "))

        state = controller.state
        for name in FIELD_NAMES:
            message = state.error_for(name)
            if message is not None:
                print(f"{name}: {message}")
        if not state.can_submit:
            continue

        submissions += 1
        print("Signing In...")
        outcome = await controller.on_submit_attempt()
        if outcome is not None and outcome["outcome"] == "success":
            print("Signed in.")
            return 0
        if controller.global_message:
            print(controller.global_message)
    return 1


async def _run_cli(args: argparse.Namespace, settings: Settings) -> int:
    """Build the configured submitter and run the interactive form."""
    if args.demo or settings.auth.demo_mode:
        submitter: AuthSubmitter = DemoAuthSubmitter(settings.auth.demo_latency_seconds)
        return await _run_sign_in(
            FormController(submitter),
            email=args.email,
            attempts=args.attempts,
            read_email=input,
            read_password=getpass.getpass,
        )

    async with HttpAuthSubmitter(
        base_url=str(settings.auth.base_url),
        login_path=settings.auth.login_path,
        timeout=settings.auth.timeout_seconds,
    ) as http_submitter:
        return await _run_sign_in(
            FormController(http_submitter),
            email=args.email,
            attempts=args.attempts,
            read_email=input,
            read_password=getpass.getpass,
        )


def _build_parser() -> argparse.ArgumentParser:
    """Build command-line parser."""
    parser = argparse.ArgumentParser(prog="python -m signin.cli")
    parser.add_argument("--email", default=None, help="Prefill the email field.")
    parser.add_argument(
        "--attempts",
        type=int,
        default=3,
        help="Maximum number of submissions before giving up.",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use the offline demo backend instead of the configured auth service.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the sign-in form."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.attempts < 1:
        parser.error("--attempts must be at least 1")

    settings = get_settings()
    configure_structlog(settings)
    try:
        return asyncio.run(_run_cli(args, settings))
    except (EOFError, KeyboardInterrupt):
        print()
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
