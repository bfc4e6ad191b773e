#!/usr/bin/env python3
"""Generate a VAPID key pair for Web Push.

Prints the pair in .env format, or appends it to a file.

Usage:
    uv run scripts/generate_vapid_keys.py [--subject mailto:you@example.com] [<env-file>]
"""

from __future__ import annotations

import sys

from leavepush.notifications.vapid import generate_vapid_keys


def render(subject: str) -> str:
    public_key, private_key = generate_vapid_keys()
    return (
        f"VAPID_PUBLIC_KEY={public_key}\n"
        f"VAPID_PRIVATE_KEY={private_key}\n"
        f"VAPID_SUBJECT={subject}\n"
    )


def main() -> None:
    args = sys.argv[1:]
    subject = "mailto:admin@example.com"
    if len(args) >= 2 and args[0] == "--subject":
        subject = args[1]
        args = args[2:]

    if len(args) > 1:
        print(
            "Usage: generate_vapid_keys.py [--subject <mailto:...>] [<env-file>]",
            file=sys.stderr,
        )
        sys.exit(1)

    text = render(subject)
    if not args:
        print(text, end="")
        return

    with open(args[0], "a") as f:
        f.write(text)
    print(f"Wrote VAPID keys to {args[0]}")


if __name__ == "__main__":
    main()
