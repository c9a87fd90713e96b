# commentblocks/core/Document.py
"""Document Module
===============
Immutable document snapshots fed to the block matcher, and the helpers that
produce them from disk.

Key Features:
-------------
- `Document` stores its lines as a tuple, so a matching pass can never see a
  buffer that changes underneath it.
- Encoding detection with `chardet`, with utf-8 / latin-1 fallbacks.
- Language detection with Pygments: by filename first, then by content, and
  `plaintext` as the last resort. The first lexer alias is used as the
  language id (`python`, `javascript`, `ruby`, ...).
"""

import logging
from pathlib import Path
from typing import NamedTuple, Optional, Union

import chardet
from pygments.lexers import get_lexer_for_filename, guess_lexer
from pygments.util import ClassNotFound


PLAINTEXT_LANGUAGE_ID = "plaintext"
CHARDET_SAMPLE_SIZE = 1024 * 20
CHARDET_MIN_CONFIDENCE = 0.75


class Document(NamedTuple):
    """Read-only snapshot of one document.

    Attributes:
        lines: Text split on "\\n"; a trailing "\\r" stays part of the line.
        language_id: Editor language identifier used to pick patterns.
        filename: Source path, if the document came from disk.
    """

    lines: tuple[str, ...]
    language_id: str
    filename: Optional[str] = None

    @classmethod
    def from_text(cls, text: str, language_id: str, filename: Optional[str] = None) -> "Document":
        return cls(tuple(text.split("\n")), language_id, filename)

    @classmethod
    def from_file(
        cls, path: Union[str, Path], language_id: Optional[str] = None
    ) -> "Document":
        """Reads `path` and builds a snapshot, detecting the language if not given.

        Raises:
            OSError: If the file cannot be read.
        """
        path = Path(path)
        text = read_text_file(path)
        if language_id is None:
            language_id = detect_language_id(str(path), text)
        return cls.from_text(text, language_id, str(path))


def read_text_file(path: Path) -> str:
    """Reads a text file, guessing its encoding with chardet."""
    raw_data = path.read_bytes()
    if not raw_data:
        logging.info(f"File '{path}' is empty.")
        return ""

    chardet_result = chardet.detect(raw_data[:CHARDET_SAMPLE_SIZE])
    encoding_guess = chardet_result.get("encoding")
    confidence = chardet_result.get("confidence") or 0.0
    logging.debug(
        f"Chardet detected encoding '{encoding_guess}' with confidence {confidence:.2f} for '{path}'."
    )

    encodings_to_try: list[str] = []
    if encoding_guess and confidence >= CHARDET_MIN_CONFIDENCE:
        encodings_to_try.append(encoding_guess)
    if "utf-8" not in encodings_to_try:
        encodings_to_try.append("utf-8")

    for encoding in encodings_to_try:
        try:
            return raw_data.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logging.debug(f"Decoding '{path}' as '{encoding}' failed, trying next.")

    # latin-1 maps every byte, so this never fails.
    logging.warning(f"Falling back to latin-1 for '{path}'.")
    return raw_data.decode("latin-1")


def detect_language_id(filename: Optional[str], text: str) -> str:
    """Returns an editor-style language id for the document.

    Follows a priority: filename > content > `plaintext`.
    """
    if filename:
        try:
            lexer = get_lexer_for_filename(filename)
            logging.debug(f"Pygments: Detected '{lexer.name}' by filename.")
            return _language_id_for(lexer)
        except ClassNotFound:
            logging.debug(f"Pygments: No lexer for filename '{filename}'.")

    content_sample = text[:10000]
    if content_sample.strip():
        try:
            lexer = guess_lexer(content_sample)
            logging.debug(f"Pygments: Guessed '{lexer.name}' by content.")
            return _language_id_for(lexer)
        except ClassNotFound:
            logging.debug("Pygments: Content guess failed.")

    logging.debug("Pygments: Falling back to plaintext.")
    return PLAINTEXT_LANGUAGE_ID


def _language_id_for(lexer) -> str:
    if not lexer.aliases or lexer.aliases[0] == "text":
        return PLAINTEXT_LANGUAGE_ID
    return lexer.aliases[0]
