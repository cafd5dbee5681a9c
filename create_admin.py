#!/usr/bin/env python3
"""
Script to create the first HR admin account.
Run this after the database migration has been completed.

Usage:
    python create_admin.py <email> <password>

Example:
    python create_admin.py hr@example.com mypassword123
"""

import sys
from pathlib import Path

# Add the apps/api directory to the path so we can import from hrportal
api_dir = Path(__file__).parent / "apps" / "api"
sys.path.insert(0, str(api_dir))

from sqlalchemy import select

from hrportal.core.database import SessionLocal
from hrportal.core.security import get_password_hash
from hrportal.models import announcement, audit_log, bank_details, document, employee, password_reset_token, paystub, pto  # noqa: F401
from hrportal.models.user import Role, User
from hrportal.services.auth import MIN_PASSWORD_LENGTH, normalize_email


def create_admin(email: str, password: str) -> bool:
    """Create an admin user in the database."""
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"❌ Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return False

    email = normalize_email(email)
    db = SessionLocal()
    try:
        existing = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if existing:
            print(f"❌ User with email {email} already exists!")
            return False

        admin = User(
            email=email,
            password_hash=get_password_hash(password),
            role=Role.ADMIN,
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)

        print("✅ Admin created successfully!")
        print(f"   User ID: {admin.user_id}")
        print(f"   Email: {admin.email}")
        return True
    except Exception as e:
        db.rollback()
        print(f"❌ Error creating admin: {e}")
        return False
    finally:
        db.close()

if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: python create_admin.py <email> <password>")
        print("Example: python create_admin.py hr@example.com mypassword123")
        sys.exit(1)

    sys.exit(0 if create_admin(sys.argv[1], sys.argv[2]) else 1)
