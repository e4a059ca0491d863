from datetime import datetime

from autorename.core.naming import doc_base, format_timestamp, generate, sibling_path


def test_generate_zero_padded():
    assert generate("Note", datetime(2024, 3, 5, 8, 7, 9), ".png") == "Note-20240305-080709.png"


def test_generate_without_extension():
    assert generate("Note", datetime(2024, 12, 31, 23, 59, 58), "") == "Note-20241231-235958"


def test_same_second_collides():
    a = generate("Note", datetime(2024, 1, 1, 0, 0, 0, 1000), ".png")
    b = generate("Note", datetime(2024, 1, 1, 0, 0, 0, 999000), ".png")
    assert a == b


def test_format_timestamp():
    assert format_timestamp(datetime(999, 1, 2, 3, 4, 5)) == "09990102-030405"


def test_doc_base():
    assert doc_base("notes/diary.md") == "diary"
    assert doc_base("my.note.md") == "my.note"
    assert doc_base("README") == "README"


def test_sibling_path_keeps_folder():
    assert sibling_path("assets/img/photo.jpg", "x.jpg") == "assets/img/x.jpg"
    assert sibling_path("photo.jpg", "x.jpg") == "x.jpg"
