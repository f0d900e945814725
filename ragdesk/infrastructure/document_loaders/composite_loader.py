import logging
from pathlib import Path

from .pdf_loader import PDFLoader
from .docx_loader import DocxLoader
from .text_loader import TextLoader

logger = logging.getLogger(__name__)


class UnsupportedFileError(ValueError):
    """No loader handles this file extension."""


class CompositeLoader:

    def __init__(self):
        self._loaders = [
            PDFLoader(),
            DocxLoader(),
            TextLoader(),
        ]

    def supports(self, file_path: Path) -> bool:
        return any(loader.supports(file_path) for loader in self._loaders)

    def _loader_for(self, file_path: Path):
        for loader in self._loaders:
            if loader.supports(file_path):
                return loader
        raise UnsupportedFileError(f"Unsupported file type: {file_path.suffix or file_path.name}")

    def load(self, file_path: Path) -> str:
        """Extract plain text.

        Raises:
            UnsupportedFileError: Unknown extension.
            Exception: Whatever the underlying parser raises.
        """
        loader = self._loader_for(file_path)
        text = loader.load(file_path)
        logger.debug(f"Loaded {file_path.name}: {len(text)} chars")
        return text
