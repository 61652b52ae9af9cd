"""Document summaries from ``data:`` URIs."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from urllib.parse import unquote_to_bytes

from pydantic import BaseModel, ValidationError

from ...core.exceptions import DocumentError, ModelError, UnsupportedDocumentError
from ...core.logging_config import get_logger
from .json_output import extract_json_object
from .oracle_client import LanguageModelOracle

logger = get_logger(__name__)

_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?P<params>(?:;[^,;]+)*),(?P<data>.*)$", re.DOTALL
)

_TEXT_MIME_TYPES = {
    "application/json",
    "application/xml",
    "application/x-tex",
    "application/x-latex",
}

_SYSTEM_PROMPT = """Résumez le document suivant. Soyez concis et concentrez-vous sur les points principaux.

Répondez uniquement avec un objet JSON de la forme :
{"summary": "<le résumé>"}"""


@dataclass(slots=True)
class Document:
    mime_type: str
    text: str


def _is_text(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type in _TEXT_MIME_TYPES


def parse_data_uri(uri: str) -> Document:
    """Decode ``data:<mime>[;base64],<data>`` into text; only text-like MIME types are accepted."""

    match = _DATA_URI_RE.match(uri.strip())
    if match is None:
        raise DocumentError("Expected a data URI of the form 'data:<mimetype>;base64,<data>'")

    mime_type = match.group("mime").lower()
    params = [param.strip().lower() for param in match.group("params").split(";") if param]
    if not _is_text(mime_type):
        raise UnsupportedDocumentError(f"Unsupported document type {mime_type!r}")

    data = match.group("data")
    if "base64" in params:
        try:
            raw = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DocumentError(f"Invalid base64 payload: {exc}") from exc
    else:
        raw = unquote_to_bytes(data)

    charset = next(
        (param.split("=", 1)[1] for param in params if param.startswith("charset=")), "utf-8"
    )
    try:
        text = raw.decode(charset)
    except (LookupError, UnicodeDecodeError) as exc:
        raise DocumentError(f"Document is not valid {charset} text") from exc
    if not text.strip():
        raise DocumentError("Document is empty")
    return Document(mime_type=mime_type, text=text)


class _SummaryPayload(BaseModel):
    summary: str | None = None


class DocumentSummarizer:
    def __init__(self, oracle: LanguageModelOracle) -> None:
        self._oracle = oracle

    async def summarize(self, document_data_uri: str) -> str:
        document = parse_data_uri(document_data_uri)
        logger.info(
            "document_summary_requested",
            mime_type=document.mime_type,
            document_chars=len(document.text),
        )
        completion = await self._oracle.complete(
            _SYSTEM_PROMPT, f"Document :\n{document.text}", json_mode=True
        )
        if not completion.message:
            raise ModelError("Language model returned no summary")

        try:
            payload = _SummaryPayload.model_validate_json(extract_json_object(completion.message))
        except ValidationError as exc:
            raise ModelError(f"Unparseable summary output: {exc}") from exc

        summary = (payload.summary or "").strip()
        if not summary:
            raise ModelError("Summary output is missing the summary")
        logger.info("document_summarized", summary_chars=len(summary))
        return summary
