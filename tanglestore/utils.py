import base64
import binascii
import hashlib
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .errors import ValidationError


def hash_bytes(data) -> str:
    h = hashlib.sha256()
    if isinstance(data, str):
        data = data.encode('utf-8')
    h.update(data)
    return h.hexdigest()


URLSAFE = str.maketrans('-_', '+/')
NON_ALPHABET = re.compile(r'[^A-Za-z0-9+/]')


def decode_base64(data: str, name: str = 'data') -> bytes:
    """Decode standard or url-safe base64, padded or not.

    Decoding stops at the first '=' and characters outside the alphabet are
    ignored, the same way Node's Buffer decodes base64.
    """
    s = data.split('=', 1)[0].translate(URLSAFE)
    s = NON_ALPHABET.sub('', s)
    s += '=' * (-len(s) % 4)
    try:
        return base64.b64decode(s, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"The parameter '{name}' is not valid base64: {e}", field=name) from e


def request_from_file(path: str, description: Optional[str] = None) -> dict:
    """Build a store request body from a local file."""
    p = Path(path)
    data = p.read_bytes()
    mtime = datetime.fromtimestamp(p.stat().st_mtime, tz=timezone.utc)
    return {
        'name': p.name,
        'description': description or p.name,
        'size': len(data),
        'modified': mtime.isoformat().replace('+00:00', 'Z'),
        'sha256': hash_bytes(data),
        'data': base64.b64encode(data).decode('ascii'),
    }
