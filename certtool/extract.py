import fitz  # PyMuPDF

from certtool.errors import NoTextExtracted


def pdf_to_text(pdf_bytes: bytes) -> str:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        pages = [page.get_text() for page in doc]
    text = "\n".join(pages)
    if not text.strip():
        raise NoTextExtracted("No text content could be extracted from the PDF.")
    return text
