from passlib.context import CryptContext

PBKDF2_ROUNDS = 29000

_pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=PBKDF2_ROUNDS,
)


class HashingError(RuntimeError):
    """Raised when the hash backend itself fails."""


def hash_password(password: str) -> str:
    try:
        return _pwd_context.hash(password)
    except Exception as exc:
        raise HashingError("password hashing failed") from exc


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # Unrecognised or corrupted hash strings fail closed.
        return False


def dummy_verify() -> None:
    _pwd_context.dummy_verify()
