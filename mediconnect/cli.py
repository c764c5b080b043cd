"""
Maintenance commands run against the configured database.

    mediconnect-admin create-admin --email admin@mediconnect.com --name "Admin User"
    mediconnect-admin seed
    mediconnect-admin list-users --role doctor
    mediconnect-admin reset-password --email doctor@gmail.com
"""
import argparse
import datetime as dt
import getpass
import logging
import sys
from typing import List, Optional

from sqlalchemy.orm import Session

from .core.database import SessionLocal, init_db
from .core.security import UserRole, get_password_hash
from .models.user import User
from .services.profile_service import ProfileService

logger = logging.getLogger(__name__)

# Demo accounts, one per role
SEED_USERS = [
    {
        "name": "Doctor Demo",
        "email": "doctor@gmail.com",
        "password": "doctor123",
        "role": UserRole.DOCTOR,
        "specialization": "General Medicine",
        "date_of_birth": dt.date(1980, 1, 1),
        "gender": "male",
    },
    {
        "name": "Patient Demo",
        "email": "patient@gmail.com",
        "password": "patient123",
        "role": UserRole.PATIENT,
        "date_of_birth": dt.date(1990, 1, 1),
        "gender": "female",
        "height": 170,
        "weight": 70,
    },
    {
        "name": "Admin User",
        "email": "admin@mediconnect.com",
        "password": "admin123",
        "role": UserRole.ADMIN,
        "date_of_birth": dt.date(1975, 1, 1),
        "gender": "male",
    },
]


def create_admin(db: Session, name: str, email: str, password: str) -> User:
    """Create an admin account with its profile, or fail if the email is taken."""
    email = email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ValueError(f"A user with email {email} already exists")

    admin = User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        role=UserRole.ADMIN,
        gender="prefer-not-to-say",
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    ProfileService(db).get_or_create_profile(admin)

    logger.info(f"Created admin user {admin.id}")
    return admin


def seed_users(db: Session) -> List[User]:
    """Insert the demo accounts that are not present yet."""
    created = []
    for data in SEED_USERS:
        data = dict(data)
        if db.query(User).filter(User.email == data["email"]).first():
            continue
        password = data.pop("password")
        user = User(password_hash=get_password_hash(password), **data)
        db.add(user)
        created.append(user)
    db.commit()
    for user in created:
        db.refresh(user)
    return created


def list_users(db: Session, role: Optional[UserRole] = None) -> List[User]:
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    return query.order_by(User.role, User.name).all()


def reset_password(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user:
        raise ValueError(f"No user with email {email}")
    user.password_hash = get_password_hash(password)
    db.commit()
    logger.info(f"Password reset for user {user.id}")
    return user


def _read_password(value: Optional[str]) -> str:
    if value:
        return value
    password = getpass.getpass("New password: ")
    if password != getpass.getpass("Repeat password: "):
        raise ValueError("Passwords do not match")
    return password


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mediconnect-admin", description="MediConnect maintenance commands")
    commands = parser.add_subparsers(dest="command", required=True)

    admin = commands.add_parser("create-admin", help="create an administrator account")
    admin.add_argument("--email", required=True)
    admin.add_argument("--name", default="Admin User")
    admin.add_argument("--password", help="prompted for when omitted")

    commands.add_parser("seed", help="insert one demo doctor, patient and admin")

    listing = commands.add_parser("list-users", help="print every account")
    listing.add_argument("--role", choices=[role.value for role in UserRole])

    reset = commands.add_parser("reset-password", help="set a new password for an account")
    reset.add_argument("--email", required=True)
    reset.add_argument("--password", help="prompted for when omitted")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    init_db()
    db = SessionLocal()
    try:
        if args.command == "create-admin":
            admin = create_admin(db, args.name, args.email, _read_password(args.password))
            print(f"Admin created: {admin.email} (id {admin.id})")
        elif args.command == "seed":
            created = seed_users(db)
            print(f"{len(created)} demo users created.")
            for user in created:
                print(f"  {user.role.value:<8} {user.email}")
        elif args.command == "list-users":
            users = list_users(db, UserRole(args.role) if args.role else None)
            for user in users:
                print(f"{user.id:>5}  {user.role.value:<8} {user.email:<32} {user.name}")
            print(f"{len(users)} users")
        elif args.command == "reset-password":
            user = reset_password(db, args.email, _read_password(args.password))
            print(f"Password updated for {user.email}")
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
