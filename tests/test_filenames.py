import pytest

from modules.documents.services.filenames import decode_filename, safe_storage_name, strip_extension


@pytest.mark.parametrize("received,expected", [
    ("report.pdf", "report.pdf"),
    ("Отчет.pdf", "Отчет.pdf"),
    ("%D0%9E%D1%82%D1%87%D0%B5%D1%82.pdf", "Отчет.pdf"),
    ("Отчет 2024.docx".encode("utf-8").decode("latin-1"), "Отчет 2024.docx"),
    ("Отчет.pdf".encode("cp1251").decode("latin-1"), "Отчет.pdf"),
    ("", ""),
])
def test_decode_filename(received, expected):
    assert decode_filename(received) == expected


def test_decode_filename_falls_back_to_raw_name():
    # Invalid percent-encoding and no recognizable alphabet
    assert decode_filename("100%ff.txt") == "100%ff.txt"
    # Not representable as latin-1, returned untouched
    assert decode_filename("报告.pdf") == "报告.pdf"


def test_strip_extension():
    assert strip_extension("contract.final.pdf") == "contract.final"
    assert strip_extension("README") == "README"
    assert strip_extension(".env") == ".env"


def test_safe_storage_name():
    assert safe_storage_name("My report (v2).pdf") == "My_report__v2_.pdf"
    assert safe_storage_name("Отчет за год.docx") == "Отчет_за_год.docx"
    assert safe_storage_name("../../etc/passwd") == "passwd"
    assert safe_storage_name("a" * 150 + ".txt") == "a" * 100 + ".txt"
