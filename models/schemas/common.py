from datetime import date

from marshmallow import ValidationError, fields, validate


def normalize_isbn(raw: str) -> str:
    if raw is None:
        raise ValidationError("ISBN is required.")
    # Keep 'X' only for ISBN-10 check-digit position
    return "".join(ch for ch in raw if ch.isdigit() or ch.upper() == "X")


def _is_valid_isbn10(digits: str) -> bool:
    if len(digits) != 10:
        return False
    total = 0
    for i, ch in enumerate(digits[:9], start=1):
        if not ch.isdigit():
            return False
        total += int(ch) * i
    check = digits[9]
    if check == "X":
        total += 10 * 10
    elif check.isdigit():
        total += int(check) * 10
    else:
        return False
    return total % 11 == 0


def _is_valid_isbn13(digits: str) -> bool:
    if len(digits) != 13 or not digits.isdigit():
        return False
    total = sum(int(ch) * (1 if i % 2 == 0 else 3) for i, ch in enumerate(digits[:12]))
    return (10 - (total % 10)) % 10 == int(digits[12])


def validate_and_normalize_isbn(raw: str) -> str:
    """Return the ISBN as stored: digits only, with a trailing X allowed for ISBN-10."""
    digits = normalize_isbn(raw).upper()
    if len(digits) == 10 and _is_valid_isbn10(digits):
        return digits
    if len(digits) == 13 and _is_valid_isbn13(digits):
        return digits
    raise ValidationError("Invalid ISBN-10 or ISBN-13.")


def validate_not_future(d: date) -> None:
    if d and d > date.today():
        raise ValidationError("Date cannot be in the future.")


def non_blank(max_len: int):
    """Validator: non-empty after strip, at most max_len characters."""
    return validate.And(
        validate.Length(min=1, max=max_len),
        validate.Predicate("strip", error="Must not be blank."),
    )


def money(**kwargs):
    """Decimal field for prices: >= 0, rendered as a string with two places."""
    return fields.Decimal(places=2, as_string=True, validate=validate.Range(min=0), **kwargs)


def money_out(**kwargs):
    return fields.Decimal(places=2, as_string=True, **kwargs)
