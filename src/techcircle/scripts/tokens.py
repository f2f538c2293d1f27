"""Mint bearer tokens for local development.

Production tokens come from the identity provider; this produces tokens
signed with the same shared secret so the API can be exercised locally.
"""

import argparse

from techcircle.core.security import create_access_token


def main() -> None:
    parser = argparse.ArgumentParser(description="Mint a development access token")
    parser.add_argument("user_id", help="Account id to place in the token subject")
    parser.add_argument(
        "--minutes",
        type=int,
        default=None,
        help="Token lifetime in minutes (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)",
    )
    args = parser.parse_args()
    print(create_access_token(args.user_id, expires_minutes=args.minutes))


if __name__ == "__main__":
    main()
