"""PDF mergers for concatenating article PDFs into an issue PDF.

Both backends write to ``<output>.part`` first and rename on success, so
the output path only ever holds a complete document.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

import fitz  # PyMuPDF

from .exceptions import MergeError

logger = logging.getLogger(__name__)

GHOSTSCRIPT_FLAGS = ["-dBATCH", "-dNOPAUSE", "-q", "-sDEVICE=pdfwrite"]


class PDFMerger(ABC):
    """Abstract base class for PDF merge backends."""

    def merge(self, inputs: Sequence[Path], output: Path) -> Path:
        """Concatenate PDFs, in order, into a single document.

        Args:
            inputs: PDF files to concatenate; every page of each is kept
            output: Path of the combined document

        Returns:
            The output path

        Raises:
            MergeError: If there is nothing to merge or the backend fails
        """
        if not inputs:
            raise MergeError(f"No documents to merge into {output}")

        output.parent.mkdir(parents=True, exist_ok=True)
        temp_path = output.with_name(output.name + ".part")
        try:
            self._merge(list(inputs), temp_path)
            temp_path.replace(output)
        except MergeError:
            temp_path.unlink(missing_ok=True)
            raise

        logger.debug(f"Merged {len(inputs)} documents into {output}")
        return output

    @abstractmethod
    def _merge(self, inputs: list[Path], output: Path) -> None:
        """Write the concatenation of ``inputs`` to ``output``."""
        pass


class PyMuPDFMerger(PDFMerger):
    """Merge PDFs in-process with PyMuPDF."""

    def _merge(self, inputs: list[Path], output: Path) -> None:
        doc = fitz.open()
        try:
            for path in inputs:
                with fitz.open(str(path)) as src:
                    doc.insert_pdf(src)
            doc.save(str(output))
        except (RuntimeError, OSError, ValueError) as e:
            raise MergeError(f"PyMuPDF merge into {output} failed: {e}") from e
        finally:
            doc.close()


class GhostscriptMerger(PDFMerger):
    """Merge PDFs by running Ghostscript in batch mode."""

    def __init__(self, executable: str = "gs"):
        self.executable = executable

    def _merge(self, inputs: list[Path], output: Path) -> None:
        args = [
            self.executable,
            *GHOSTSCRIPT_FLAGS,
            f"-sOutputFile={output}",
            *(str(path) for path in inputs),
        ]
        try:
            subprocess.run(args, check=True, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise MergeError(f"Ghostscript executable not found: {self.executable}") from e
        except subprocess.CalledProcessError as e:
            raise MergeError(
                f"Ghostscript exited with {e.returncode}: {e.stderr.strip()}"
            ) from e


MERGERS = {
    "pymupdf": PyMuPDFMerger,
    "ghostscript": GhostscriptMerger,
}


def get_merger(name: str) -> PDFMerger:
    """Create a merge backend by name."""
    try:
        return MERGERS[name]()
    except KeyError:
        raise ValueError(f"Unknown PDF merger: {name}") from None
