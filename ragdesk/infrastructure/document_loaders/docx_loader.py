from pathlib import Path

from docx import Document


class DocxLoader:

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() == ".docx"

    def load(self, file_path: Path) -> str:
        doc = Document(file_path)
        blocks = [p.text.strip() for p in doc.paragraphs if p.text.strip()]
        # Service lists often live in tables; keep one row per line.
        for table in doc.tables:
            for row in table.rows:
                cells = [c.text.strip() for c in row.cells if c.text.strip()]
                if cells:
                    blocks.append(" | ".join(cells))
        return "\n\n".join(blocks)
