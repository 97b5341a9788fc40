"""Document writers for the supported output formats.

- markdown: Hugo-style pages under the build directory
- html: fragments assembled into a single ``index.html``
- tex: LaTeX includes assembled into ``main.tex``
"""

from apidocs.generators.toc import TOC, TOCItem
from apidocs.generators.writer import (
    WRITERS,
    DocWriter,
    UnsupportedFormatError,
    generate_files,
    get_writer,
)

__all__ = [
    "TOC",
    "TOCItem",
    "WRITERS",
    "DocWriter",
    "UnsupportedFormatError",
    "generate_files",
    "get_writer",
]
