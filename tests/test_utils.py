# tests/test_utils.py
from decimal import Decimal

import pytest

from utils import folder_name, format_file_size, generate_file_name, same_decimal, storage_path


@pytest.mark.parametrize("camp_id, expected", [
    (54, "54"),
    (54.0, "54"),
    (53.5, "53-5"),
    (Decimal("53.5"), "53-5"),
    ("53.5", "53-5"),
    (0.5, "0-5"),
])
def test_folder_name(camp_id, expected):
    assert folder_name(camp_id) == expected


def test_folder_name_replaces_only_first_dot():
    # ids typed with more than one dot keep the rest untouched
    assert folder_name("1.2.3") == "1-2.3"


def test_folder_name_negative_id():
    assert folder_name(-1.5) == "-1-5"


@pytest.mark.parametrize("camp_id", [54, 53.5, 7.25])
def test_storage_path(camp_id):
    assert storage_path(camp_id, "x.jpg") == "main/" + folder_name(camp_id) + "/x.jpg"


def test_generate_file_name_lowercases_extension():
    assert generate_file_name("IMG_0001.JPG", 3, now_ms=1700000000000) == "1700000000000-3.jpg"


def test_generate_file_name_defaults_to_jpg():
    assert generate_file_name("scan", 0, now_ms=1) == "1-0.jpg"
    assert generate_file_name("", 1, now_ms=1) == "1-1.jpg"


def test_generate_file_name_is_deterministic():
    assert generate_file_name("a.png", 2, now_ms=42) == generate_file_name("a.png", 2, now_ms=42)


@pytest.mark.parametrize("size, label", [
    (0, "0 B"),
    (512, "512 B"),
    (1536, "1.5 KB"),
    (5 * 1024 * 1024, "5 MB"),
    (int(4.5 * 1024 * 1024), "4.5 MB"),
])
def test_format_file_size(size, label):
    assert format_file_size(size) == label


@pytest.mark.parametrize("a, b, same", [
    ("54.0", 54, True),
    (54.0, "54", True),
    (Decimal("53.50"), 53.5, True),
    ("53.5", 53.6, False),
    ("abc", 54, False),
    (True, 1, False),
])
def test_same_decimal(a, b, same):
    assert same_decimal(a, b) is same
