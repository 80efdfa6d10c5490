# utils.py — storage naming helpers for camp images (pure functions)
import math
import os
import time
from decimal import Decimal, InvalidOperation

STORAGE_ROOT = "main"
DEFAULT_EXT = "jpg"


def decimal_string(value) -> str:
    """
    Decimal rendering of a camp id as the dashboard shows it:
      54 -> "54", 54.0 -> "54", 53.5 -> "53.5"
    Strings are taken as typed (so "1.2.3" stays "1.2.3").
    """
    if isinstance(value, bool):
        raise TypeError("camp id cannot be a boolean")
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return str(int(value))
        return format(value.normalize(), "f")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def same_decimal(a, b) -> bool:
    """True when both values are the same number: "54.0", 54 and 54.0 all match."""
    try:
        return Decimal(decimal_string(a)) == Decimal(decimal_string(b))
    except (InvalidOperation, TypeError):
        return False


def folder_name(camp_id) -> str:
    # only the first "." is replaced: 53.5 -> "53-5"
    return decimal_string(camp_id).replace(".", "-", 1)


def storage_path(camp_id, file_name: str) -> str:
    return f"{STORAGE_ROOT}/{folder_name(camp_id)}/{file_name}"


def file_extension(file_name: str, default: str = DEFAULT_EXT) -> str:
    ext = os.path.splitext(file_name or "")[1].lstrip(".").lower()
    return ext or default


def generate_file_name(original_name: str, index: int = 0, now_ms: int = None) -> str:
    """<millisecond-timestamp>-<index>.<ext> ; ext defaults to jpg."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{now_ms}-{index}.{file_extension(original_name)}"


def format_file_size(num_bytes: int) -> str:
    if not num_bytes:
        return "0 B"
    k = 1024
    sizes = ["B", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(num_bytes) / math.log(k))), len(sizes) - 1)
    value = round(num_bytes / math.pow(k, i), 1)
    if value.is_integer():
        value = int(value)
    return f"{value} {sizes[i]}"


def normalize(s: str) -> str:
    return (s or "").strip().lower()
