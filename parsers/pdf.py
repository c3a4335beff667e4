import logging

import fitz  # PyMuPDF

LOGGER = logging.getLogger(__name__)


def pdf_to_text(data: bytes) -> str:
    """
    Extract text from an uploaded PDF held in memory.
    Returns an empty string when the bytes are not a readable PDF.
    """

    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            text = "\n".join(page.get_text("text") for page in doc)
        return text.strip()

    except Exception as e:
        LOGGER.warning("PDF extraction failed: %s", e)
        return ""
