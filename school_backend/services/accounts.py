"""Account persistence: registration, credential checks and admin CRUD.

Uniqueness of ``email`` is enforced by the unique index on ``users.email``.
Inserts are attempted directly and a unique-index ``IntegrityError`` is
reported as :class:`DuplicateAccountError`, so concurrent registrations for
one address cannot both succeed.
"""

import logging
import re
from typing import Any, Iterable

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from school_backend.auth.passwords import dummy_verify, hash_password, verify_password
from school_backend.models.user import ROLES, User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    'name',
    'number',
    'class_name',
    'address',
    'father_name',
    'mother_name',
    'age',
    'birthdate',
    'gender',
    'passport_image',
)
UPDATABLE_FIELDS = ('email', 'name', 'number', 'class_name', 'address', 'password')
ALL_DATA_SEARCH_COLUMNS = (User.email, User.name, User.number, User.class_name, User.address)
SEARCH_COLUMNS = (User.name, User.class_name)


class DuplicateAccountError(Exception):
    def __init__(self, email: str):
        super().__init__(f'account already exists for {email}')
        self.email = email


class AccountNotFoundError(Exception):
    def __init__(self, account_id: int):
        super().__init__(f'account {account_id} not found')
        self.account_id = account_id


class InvalidSearchPatternError(ValueError):
    def __init__(self, pattern: str):
        super().__init__(f'invalid search pattern: {pattern!r}')
        self.pattern = pattern


def normalize_email(email: str) -> str:
    return (email or '').strip().lower()


def _is_unique_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return 'unique' in message or 'duplicate' in message


def _commit(db: Session, email: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if not _is_unique_violation(exc):
            raise
        raise DuplicateAccountError(email) from exc
    except Exception:
        db.rollback()
        raise


def create_account(db: Session, *, email: str, password: str, role: str, **profile: Any) -> User:
    unknown = set(profile) - set(PROFILE_FIELDS)
    if unknown:
        raise TypeError(f'unexpected profile fields: {sorted(unknown)}')
    if role not in ROLES:
        raise ValueError(f'unknown role: {role!r}')

    normalized_email = normalize_email(email)
    user = User(
        email=normalized_email,
        password_hash=hash_password(password),
        role=role,
        **profile,
    )
    db.add(user)
    _commit(db, normalized_email)
    db.refresh(user)

    logger.info('Registered %s account %s', role, normalized_email)
    return user


def get_account_by_email(db: Session, email: str) -> User | None:
    normalized_email = normalize_email(email)
    if not normalized_email:
        return None
    return db.query(User).filter(User.email == normalized_email).first()


def authenticate(db: Session, email: str, password: str) -> User | None:
    """Return the account when the credentials match, otherwise ``None``.

    Unknown emails still pay for one hash verification so the two failure
    cases are indistinguishable to the caller.
    """
    user = get_account_by_email(db, email)
    if user is None:
        dummy_verify()
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def _matches(column, pattern: str, dialect_name: str):
    # The SQLite compiler drops regexp flags, so case folding goes inline there.
    if dialect_name == 'sqlite':
        return column.regexp_match(f'(?i){pattern}')
    return column.regexp_match(pattern, flags='i')


def search_accounts(db: Session, term: str | None, columns: Iterable = SEARCH_COLUMNS) -> list[User]:
    """Return accounts where any of ``columns`` matches ``term`` as a case-insensitive regex.

    A blank term matches every account. A term that does not compile raises
    :class:`InvalidSearchPatternError`.
    """
    query = db.query(User)
    term = (term or '').strip()
    if term:
        try:
            re.compile(f'(?i){term}')
        except re.error as exc:
            raise InvalidSearchPatternError(term) from exc
        dialect_name = db.get_bind().dialect.name
        query = query.filter(or_(*(_matches(column, term, dialect_name) for column in columns)))
    return query.order_by(User.id.asc()).all()

def list_classes(db: Session) -> list[str]:
    rows = db.query(User.class_name).filter(User.class_name.is_not(None)).distinct().all()
    return sorted(class_name for (class_name,) in rows)


def list_students_of_class(db: Session, class_name: str) -> list[User]:
    return db.query(User).filter(User.class_name == class_name).order_by(User.id.asc()).all()


def update_account(db: Session, account_id: int, changes: dict[str, Any]) -> User:
    user = db.get(User, account_id)
    if user is None:
        raise AccountNotFoundError(account_id)

    for field_name, value in changes.items():
        if field_name not in UPDATABLE_FIELDS:
            raise TypeError(f'field {field_name!r} cannot be updated')
        if value is None:
            continue
        if field_name == 'password':
            user.password_hash = hash_password(value)
        elif field_name == 'email':
            user.email = normalize_email(value)
        else:
            setattr(user, field_name, value)

    _commit(db, user.email)
    db.refresh(user)

    logger.info('Updated account %s', account_id)
    return user


def delete_account(db: Session, account_id: int) -> None:
    user = db.get(User, account_id)
    if user is None:
        raise AccountNotFoundError(account_id)

    db.delete(user)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info('Removed account %s', account_id)
