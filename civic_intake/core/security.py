from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from civic_intake.core.config import settings
from civic_intake.core.policy import Role

# bcrypt work factor - every hash embeds it, so raising it later only affects new hashes
BCRYPT_ROUNDS = 12

# CryptContext handles salting and encodes salt + cost into the hash string,
# so verification needs nothing besides the stored hash
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


@dataclass(frozen=True)
class SessionClaims:
    """Identity carried inside a session token"""
    user_id: str
    email: str
    role: Role


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unrecognized or corrupt hash string
        return False


def simulate_password_check() -> None:
    """Spend the same time as a real verify when there is no user to check against"""
    pwd_context.dummy_verify()


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt with a fresh salt"""
    return pwd_context.hash(password)


def create_access_token(
    claims: SessionClaims,
    issued_at: Optional[datetime] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT session token for the given identity"""
    if issued_at is None:
        issued_at = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode = {
        # JWT standard 'sub' claim carries the user id
        "sub": claims.user_id,
        "email": claims.email,
        "role": claims.role.value,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[SessionClaims]:
    """Decode and verify a JWT token, returning None on any failure"""
    try:
        # Verifies signature and expiration
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    try:
        return SessionClaims(
            user_id=payload["sub"],
            email=payload["email"],
            role=Role(payload["role"]),
        )
    except (KeyError, ValueError):
        # Signed by us but missing claims or carrying a role we no longer know
        return None
