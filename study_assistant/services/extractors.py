import io
import os
from typing import Callable, Dict, Iterator
import PyPDF2
import docx
import openpyxl
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE

class UnsupportedFileType(Exception):
    def __init__(self, extension: str) -> None:
        self.extension = extension
        super().__init__(f"Unsupported file type: {extension}")

def extract_pdf(data: bytes) -> str:
    with io.BytesIO(data) as stream:
        reader = PyPDF2.PdfReader(stream)
        return "\n".join((p.extract_text() or "") for p in reader.pages)

def extract_docx(data: bytes) -> str:
    with io.BytesIO(data) as stream:
        document = docx.Document(stream)
        return "\n".join(p.text for p in document.paragraphs)

def _shape_texts(shapes) -> Iterator[str]:
    for shape in shapes:
        if shape.shape_type == MSO_SHAPE_TYPE.GROUP:
            yield from _shape_texts(shape.shapes)
        elif shape.has_table:
            for row in shape.table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    yield " ".join(cells)
        elif shape.has_text_frame:
            yield shape.text_frame.text

def extract_pptx(data: bytes) -> str:
    with io.BytesIO(data) as stream:
        presentation = Presentation(stream)
        slides = []
        for slide in presentation.slides:
            slides.append("\n".join(t for t in _shape_texts(slide.shapes) if t))
        return "\n\n".join(slides)

def extract_xlsx(data: bytes) -> str:
    with io.BytesIO(data) as stream:
        workbook = openpyxl.load_workbook(stream, read_only=True, data_only=True)
        try:
            sheets = []
            for worksheet in workbook.worksheets:
                rows = []
                for row in worksheet.iter_rows(values_only=True):
                    cells = [str(v).strip() for v in row if v is not None and str(v).strip()]
                    if cells:
                        rows.append(" ".join(cells))
                sheets.append("\n".join(rows) + "\n\n")
            return "".join(sheets)
        finally:
            workbook.close()

def extract_txt(data: bytes) -> str:
    return data.decode("utf-8")

EXTRACTORS: Dict[str, Callable[[bytes], str]] = {
    ".pdf": extract_pdf,
    ".docx": extract_docx,
    ".pptx": extract_pptx,
    ".xlsx": extract_xlsx,
    ".txt": extract_txt,
}

SUPPORTED_EXTENSIONS = tuple(sorted(EXTRACTORS))

def file_extension(file_name: str) -> str:
    return file_name.lower().rsplit(".", 1)[-1]

def is_supported(file_name: str) -> bool:
    return os.path.splitext(file_name.lower())[1] in EXTRACTORS

class TextExtractor:
    """Picks a format-specific extractor from the file extension."""

    def __init__(self) -> None:
        self.extractors = dict(EXTRACTORS)

    def extractor_for(self, file_name: str) -> Callable[[bytes], str]:
        extractor = self.extractors.get(os.path.splitext(file_name.lower())[1])
        if extractor is None:
            raise UnsupportedFileType(file_extension(file_name))
        return extractor

    def extract(self, file_name: str, data: bytes) -> str:
        return self.extractor_for(file_name)(data)
