"""Print a long-lived access token for a user email.

Usage:
    python create_token.py admin@example.com [days]
"""
import sys

from digital_bank_api.app.core.security import create_access_token

if __name__ == "__main__":
    email = sys.argv[1] if len(sys.argv) > 1 else "admin@example.com"
    days = int(sys.argv[2]) if len(sys.argv) > 2 else 365
    print(create_access_token({"sub": email}, expires_delta=days * 24 * 60 * 60))
