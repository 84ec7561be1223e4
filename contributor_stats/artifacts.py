#!/usr/bin/env python3
"""
Audit trail of raw API responses.

Response bodies (and headers for the fast counter) are written to a directory
relative to the working directory. The directory is never cleaned up.
"""

import logging
import os
from typing import Optional

from .models import PageResponse, RepositoryRef

DEFAULT_OUTPUT_DIR = "./tmp"


class ArtifactWriter:
    """Writes raw responses under a persistent output directory."""

    def __init__(self, output_dir: str = DEFAULT_OUTPUT_DIR):
        """
        Initialize the writer.

        Args:
            output_dir: Directory for the saved files. Created on enter.
        """
        self.output_dir = output_dir
        self.logger = logging.getLogger(__name__)

    def __enter__(self):
        os.makedirs(self.output_dir, exist_ok=True)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass

    def _write(self, filename: str, content: str) -> Optional[str]:
        path = os.path.join(self.output_dir, filename)
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            self.logger.warning(f"Could not save {path}: {e}")
            return None
        self.logger.debug(f"Saved {path}")
        return path

    def save_headers(self, repo: RepositoryRef, page: PageResponse) -> Optional[str]:
        content = f"{page.status_line}\r\n{page.header_text}"
        return self._write(f"{repo.file_safe_name}.headers.txt", content)

    def save_body(self, repo: RepositoryRef, page: PageResponse) -> Optional[str]:
        return self._write(f"{repo.file_safe_name}.body.json", page.body)

    def save_page(self, repo: RepositoryRef, page_number: int, page: PageResponse) -> Optional[str]:
        """Save one page of a paginated traversal."""
        return self._write(f"{repo.file_safe_name}.page-{page_number}.json", page.body)
