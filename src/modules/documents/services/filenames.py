"""Recovery of uploaded filenames.

Multipart clients frequently send non-ASCII filenames as UTF-8 (or CP1251)
bytes that end up decoded as latin-1. ``decode_filename`` tries to recover
the real name; it never raises and falls back to the name as received.

Fallback order:

1. percent-decoding, when the name contains ``%``;
2. the latin-1 bytes of the name re-read as each of ``DECODE_ENCODINGS``,
   accepting the first candidate whose non-ASCII characters all belong to
   the target alphabet (Cyrillic by default);
3. the raw name.

A latin-1 name such as ``café`` can still be misread as CP1251; UTF-8 is
tried first because a strict UTF-8 decode rarely succeeds by accident.
"""
import os
import re
from urllib.parse import unquote

DECODE_ENCODINGS = ("utf-8", "cp1251")
TARGET_ALPHABET = re.compile(r"[а-яА-ЯёЁ]")

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9а-яА-ЯёЁ\s\-_]")
_WHITESPACE = re.compile(r"\s+")
MAX_BASE_LENGTH = 100


def decode_filename(filename: str, alphabet: re.Pattern = TARGET_ALPHABET) -> str:
    if not filename:
        return filename

    if "%" in filename:
        try:
            return unquote(filename, errors="strict")
        except UnicodeDecodeError:
            pass

    if alphabet.search(filename):
        return filename

    try:
        raw = filename.encode("latin-1")
    except UnicodeEncodeError:
        return filename

    for encoding in DECODE_ENCODINGS:
        try:
            candidate = raw.decode(encoding)
        except UnicodeDecodeError:
            continue
        if _in_alphabet(candidate, alphabet):
            return candidate

    return filename


def _in_alphabet(text: str, alphabet: re.Pattern) -> bool:
    non_ascii = [ch for ch in text if ord(ch) > 127]
    return bool(non_ascii) and all(alphabet.match(ch) for ch in non_ascii)


def strip_extension(filename: str) -> str:
    base, _ = os.path.splitext(filename)
    return base or filename


def safe_storage_name(filename: str) -> str:
    """Filesystem-safe version of a decoded filename, extension preserved"""
    base, ext = os.path.splitext(os.path.basename(filename))
    base = _UNSAFE_CHARS.sub("_", base)
    base = _WHITESPACE.sub("_", base)[:MAX_BASE_LENGTH] or "file"
    ext = re.sub(r"[^a-zA-Z0-9.]", "", ext)
    return f"{base}{ext}"
