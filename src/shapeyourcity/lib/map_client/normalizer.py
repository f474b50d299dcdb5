"""Response normalization — turn raw remote answers into stored values.

Rules, applied per response in source order:
  1. The question is trimmed.
  2. A missing or ``null`` answer drops the response.
  3. A ``FileQuestion`` answer is stored as the JSON text sent, trimmed.
  4. Any other answer must be a JSON string; it is trimmed and dropped
     when empty, otherwise its UTF-8 bytes become the stored answer.
"""

import json
from collections.abc import Iterable

from shapeyourcity.lib.map_client.parser import DecodeError, RemoteMarkerResponse
from shapeyourcity.schemas.marker import FILE_QUESTION, MarkerResponse


def normalize_answer(question_type: str, raw_answer: str | None) -> bytes | None:
    """Normalize one raw answer.

    Args:
        question_type: The remote question type discriminator.
        raw_answer: The answer's undecoded JSON text (None when absent).

    Returns:
        The bytes to store, or None when the response should be dropped.

    Raises:
        DecodeError: If a non-file answer is not a JSON string.
    """
    if raw_answer is None:
        return None

    answer = raw_answer.strip().encode("utf-8")
    if not answer or answer == b"null":
        return None

    if question_type == FILE_QUESTION:
        return answer

    try:
        value = json.loads(answer)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON answer for {question_type or 'untyped'} question: {exc}"
        raise DecodeError(msg) from exc
    if not isinstance(value, str):
        msg = f"Expected a string answer for {question_type or 'untyped'} question, got {type(value).__name__}"
        raise DecodeError(msg)

    text = value.strip()
    if not text:
        return None
    return text.encode("utf-8")


def normalize_responses(records: Iterable[RemoteMarkerResponse]) -> list[MarkerResponse]:
    """Normalize raw response records, dropping empty answers.

    Raises:
        DecodeError: If any non-file answer is not a JSON string.
    """
    out: list[MarkerResponse] = []
    for record in records:
        answer = normalize_answer(record.question_type, record.answer)
        if answer is None:
            continue
        out.append(
            MarkerResponse(
                mode=record.mode,
                question_type=record.question_type,
                question=record.question.strip(),
                answer=answer,
            )
        )
    return out
