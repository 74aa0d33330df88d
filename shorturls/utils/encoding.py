import secrets
import string

# URL-safe alphabet (letters, digits, "_" and "-"); case is significant
ALPHABET = string.ascii_letters + string.digits + "_-"
SHORT_CODE_LENGTH = 6


def generate_short_code(length: int = SHORT_CODE_LENGTH) -> str:
    """Generate a random short code of ``length`` URL-safe characters.

    Uniqueness is not checked here; the caller owns collision handling.
    """
    return ''.join(secrets.choice(ALPHABET) for _ in range(length))
