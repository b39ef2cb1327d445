#!/usr/bin/env python3
"""
Hash a password for a student account (manual account repair).

Usage:
    python scripts/hash_password.py <password> [--email student@tamu.edu]
"""

import sys
import argparse
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


def main():
    parser = argparse.ArgumentParser(description="Generate a bcrypt hash for a student password")
    parser.add_argument("password", help="Plain-text password to hash")
    parser.add_argument("--email", default="student@tamu.edu", help="Email used in the sample SQL")
    args = parser.parse_args()

    if not args.password:
        print("Error: Password is required")
        sys.exit(1)

    from cmis_portal.core.security import get_password_hash

    hashed = get_password_hash(args.password)

    print("\nHashed Password:")
    print(hashed)
    print("\nYou can use this in your SQL update statement:")
    print(f"UPDATE students SET password = '{hashed}' WHERE email = '{args.email.strip().lower()}';")


if __name__ == "__main__":
    main()
