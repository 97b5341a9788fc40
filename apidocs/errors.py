"""Exception base class shared by the generator packages."""

from __future__ import annotations


class ApiDocsError(Exception):
    """Base exception for reference documentation generation errors."""

    pass
