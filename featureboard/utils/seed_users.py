import argparse
import logging

from sqlalchemy.orm import Session

from featureboard.core.db import SessionLocal, init_db
from featureboard.models.user import ROLE_CLIENT, ROLES
from featureboard.services.identity import create_account, find_user_by_email

logger = logging.getLogger(__name__)


def seed_user(db: Session, email: str, password: str, first_name: str, last_name: str, role: str = ROLE_CLIENT):
    """Create the account, or just set the role if the email already exists."""
    existing = find_user_by_email(email, db)
    if existing:
        existing.role = role
        db.commit()
        print(f"🔁 Updated {existing.email} → {role}")
        return existing

    user = create_account(email, password, first_name, last_name, db, role=role)
    db.commit()
    print(f"✅ Added {role}: {user.display_name} ({user.email})")
    return user


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote FeatureBoard users")
    parser.add_argument("--email", required=True, help="User email")
    parser.add_argument("--password", required=True, help="Initial password")
    parser.add_argument("--first-name", required=True, help="First name")
    parser.add_argument("--last-name", required=True, help="Last name")
    parser.add_argument("--role", default=ROLE_CLIENT, choices=ROLES, help="client or admin")

    args = parser.parse_args()

    init_db()
    db = SessionLocal()
    try:
        seed_user(db, args.email, args.password, args.first_name, args.last_name, args.role)
    finally:
        db.close()
