"""
Хеширование паролей (bcrypt, соль генерируется для каждого пароля)
"""
import bcrypt

# bcrypt учитывает только первые 72 байта пароля
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
    except ValueError:
        # Хеш в базе повреждён или не является bcrypt
        return False
