from .errors import ValidationError


def string(value, name: str) -> str:
    if not isinstance(value, str) or len(value) == 0:
        raise ValidationError(f"The parameter '{name}' must be a non-empty string.", field=name)
    return value


def number(value, name: str):
    # bool is an int subclass but never a valid size
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"The parameter '{name}' must be a number.", field=name)
    if value != value:
        raise ValidationError(f"The parameter '{name}' must be a number.", field=name)
    return value


def store_request(request: dict) -> None:
    """Check every field of an incoming store request, in wire order."""
    string(request.get('name'), 'name')
    string(request.get('description'), 'description')
    number(request.get('size'), 'size')
    string(request.get('modified'), 'modified')
    string(request.get('sha256'), 'sha256')
    string(request.get('data'), 'data')
