"""Password hashing and access tokens."""

from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from config import ALGORITHM

BCRYPT_ROUNDS = 10

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        # not a hash passlib recognises
        return False


def create_access_token(user_id: str, secret: str) -> str:
    # no "exp" claim: tokens stay valid until the secret is rotated
    return jwt.encode({"userId": str(user_id)}, secret, algorithm=ALGORITHM)


def decode_access_token(token: str, secret: str) -> str:
    payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    user_id: Optional[str] = payload.get("userId")
    if not user_id:
        raise JWTError("userId claim missing")
    return user_id
