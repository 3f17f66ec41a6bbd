"""Errors raised while building the lookup indices."""

from __future__ import annotations


class IndexBuildError(Exception):
    """Raised when the analysis input breaks an index invariant."""


class DuplicateIdentifierError(IndexBuildError):
    """Raised when two layers or two trees share an identifier."""

    def __init__(self, kind: str, identifier: object) -> None:
        super().__init__(f"duplicate {kind} id: {identifier}")
        self.kind = kind
        self.identifier = identifier
