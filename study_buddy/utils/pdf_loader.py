import fitz  # PyMuPDF
import re


class PdfReadError(ValueError):
    """The uploaded bytes are not a readable PDF."""


def extract_text_from_pdf(pdf_bytes: bytes) -> str:
    """Extract text from PDF bytes.

    Uses 'blocks' extraction so multi-column pages keep their reading order.
    NUL characters are stripped; some databases refuse them in text columns.
    """
    try:
        pdf = fitz.open(stream=pdf_bytes, filetype="pdf")
    except (RuntimeError, ValueError) as e:  # FileDataError is a RuntimeError
        raise PdfReadError(str(e)) from e

    all_text = []
    with pdf:
        if pdf.page_count == 0:
            raise PdfReadError("PDF has no pages")
        for page in pdf:
            # Each block is a tuple: (x0, y0, x1, y1, "text", block_no, block_type)
            blocks = page.get_text("blocks")

            # Top-to-bottom, then left-to-right
            blocks = sorted(blocks, key=lambda b: (b[1], b[0]))

            for block in blocks:
                if block[6] == 0:  # Type 0 = text block
                    block_text = block[4].strip()
                    if block_text:
                        all_text.append(block_text)

    text = "\n\n".join(all_text)
    text = re.sub(r'\n{3,}', '\n\n', text)
    text = text.replace("\x00", "")

    return text.strip()
