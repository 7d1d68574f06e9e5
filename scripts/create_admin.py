#!/usr/bin/env python3
"""
Create an admin account, or promote an existing user to admin.

Usage:
    python scripts/create_admin.py <username> <email> <name>

The password is read from the terminal.
"""

import argparse
import getpass
import sys
from pathlib import Path

# Add parent directory to path to import our modules
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from atelier.database import SessionLocal
from atelier.models import User, UserRole
from atelier.services.auth_service import AuthService


def create_admin(username: str, email: str, name: str, password: str) -> User:
    """
    Raises:
        ValueError: If the username or email is taken by a different account
    """
    email = email.lower()
    with SessionLocal() as session:
        by_username = session.execute(
            select(User).where(User.username == username)
        ).scalar_one_or_none()
        by_email = session.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()

        if by_username is not by_email:
            if by_username and by_email:
                raise ValueError(f"{username} and {email} belong to different accounts")
            if by_username:
                raise ValueError(f"Username {username} is registered with {by_username.email}")
            raise ValueError(f"Email {email} is registered to {by_email.username}")

        user = by_username
        if user:
            user.role = UserRole.ADMIN.value
            user.verified = True
            print(f"✓ Promoted existing user {user.username} to admin")
        else:
            user = User(
                username=username,
                email=email,
                password_hash=AuthService.hash_password(password),
                name=name,
                role=UserRole.ADMIN.value,
                verified=True,
                preferences={},
            )
            session.add(user)
            print(f"✓ Created admin {username}")

        session.commit()
        session.refresh(user)
        return user


def main():
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("username")
    parser.add_argument("email")
    parser.add_argument("name")
    args = parser.parse_args()

    password = getpass.getpass("Password (minimum 8 characters): ")
    if len(password) < 8:
        print("❌ Password must be at least 8 characters")
        sys.exit(1)

    try:
        create_admin(args.username, args.email, args.name, password)
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
