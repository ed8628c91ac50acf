"""
Command-line entry point.

``auth`` runs the interactive OAuth login; every other command is an API
call that needs an access token.
"""

import sys

API_COMMANDS = ("profile", "media", "get-media", "children", "exchange", "refresh")

USAGE = (
    "Usage: instagram-api auth [--app-id ...] [--scope ...]\n"
    "       instagram-api [--access-token TOKEN] "
    "{" + ",".join(API_COMMANDS) + "} ..."
)


def main() -> None:
    command = next(
        (arg for arg in sys.argv[1:] if arg == "auth" or arg in API_COMMANDS),
        None,
    )

    if command == "auth":
        sys.argv.remove("auth")
        from .auth import main as auth_main

        auth_main()
    elif command in API_COMMANDS:
        from .client import main as client_main

        client_main()
    else:
        print(USAGE, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
