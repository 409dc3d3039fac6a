"""Print a bearer token for an existing user.

Usage:
    python create_token.py organizer@example.com [--days 30]
"""
import argparse

from meetup_planner_api.app.core.security import create_access_token


def main() -> None:
    parser = argparse.ArgumentParser(description="Issue a development bearer token.")
    parser.add_argument("email", help="Email of a user present in the users table")
    parser.add_argument("--days", type=int, default=30, help="Token lifetime in days")
    args = parser.parse_args()
    print(create_access_token({"sub": args.email}, expires_delta=args.days * 24 * 60 * 60))


if __name__ == "__main__":
    main()
