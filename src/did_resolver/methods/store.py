"""DocumentStoreStrategy — serve pre-registered documents for one DID method.

Stores :class:`~did_resolver.document.VerificationDocument` objects keyed
by their ``id``. Use it for methods whose documents live in a ledger or a
content-addressed store: load the documents ahead of time and resolution
needs no network access. All public methods are thread-safe via a single
:class:`threading.Lock`.

The store supports import/export to a newline-delimited JSON file (one
document per line).
"""
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from did_resolver.document import VerificationDocument
from did_resolver.errors import DIDNotFoundError, KeyDecodingError
from did_resolver.methods.base import ResolutionStrategy

logger = logging.getLogger(__name__)


class DocumentAlreadyRegisteredError(ValueError):
    """Raised when registering a DID that the store already holds."""

    def __init__(self, did: str) -> None:
        self.did = did
        super().__init__(
            f"DID {did!r} is already registered. "
            "Use update() to replace an existing document."
        )


class DocumentStoreStrategy(ResolutionStrategy):
    """In-memory document store acting as the strategy for *method*.

    Parameters
    ----------
    method:
        The DID method served, e.g. ``"jolo"``. Registered documents must
        have ids of the form ``did:<method>:...``.

    Example
    -------
    ::

        store = DocumentStoreStrategy("example")
        store.register(VerificationDocument(id="did:example:123"))
        registry.register(store)
        registry.resolve("did:example:123")
    """

    def __init__(self, method: str) -> None:
        if not method:
            raise ValueError("DocumentStoreStrategy requires a method name.")
        self.method = method
        self._documents: dict[str, VerificationDocument] = {}
        self._lock = threading.Lock()

    def _check_method(self, did: str) -> None:
        if not did.startswith(f"did:{self.method}:"):
            raise ValueError(f"DID {did!r} does not belong to method {self.method!r}.")

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def register(self, document: VerificationDocument) -> str:
        """Add *document* to the store and return its DID.

        Raises
        ------
        ValueError
            If the document's id belongs to another method.
        DocumentAlreadyRegisteredError
            If a document with the same id is already stored.
        """
        self._check_method(document.id)
        with self._lock:
            if document.id in self._documents:
                raise DocumentAlreadyRegisteredError(document.id)
            self._documents[document.id] = document
        logger.debug("Stored document for %s", document.id)
        return document.id

    def update(self, did: str, document: VerificationDocument) -> bool:
        """Replace the document stored for *did*.

        Returns
        -------
        bool
            ``True`` if the update succeeded, ``False`` if *did* is not stored.

        Raises
        ------
        ValueError
            If ``document.id`` does not match *did*.
        """
        if document.id != did:
            raise ValueError(
                f"document.id {document.id!r} does not match the target DID {did!r}."
            )
        with self._lock:
            if did not in self._documents:
                return False
            self._documents[did] = document
        return True

    def remove(self, did: str) -> bool:
        """Drop *did* from the store. Returns ``False`` if it was not stored."""
        with self._lock:
            return self._documents.pop(did, None) is not None

    def resolve(self, did: str, side_channel: bytes | None = None) -> VerificationDocument:
        """Return the stored document for *did*. *side_channel* is ignored.

        Raises
        ------
        DIDNotFoundError
            If *did* is not stored.
        """
        with self._lock:
            document = self._documents.get(did)
        if document is None:
            raise DIDNotFoundError(did)
        return document

    def list_dids(self) -> list[str]:
        """Return a sorted list of all stored DIDs."""
        with self._lock:
            return sorted(self._documents)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_store(self, path: Path) -> None:
        """Write every stored document to *path*, one JSON object per line."""
        with self._lock:
            documents = sorted(self._documents.values(), key=lambda d: d.id)
        lines = [json.dumps(document.to_dict()) for document in documents]
        path.write_text("\n".join(lines), encoding="utf-8")

    def import_store(self, path: Path) -> int:
        """Load documents from an NDJSON file produced by :meth:`export_store`.

        Existing entries are retained; imported entries with a DID already
        in the store are skipped.

        Returns
        -------
        int
            The number of documents added.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        ValueError
            If a line is not a valid document for this store's method.
        """
        content = path.read_text(encoding="utf-8").strip()
        added = 0
        for line_number, raw_line in enumerate(content.splitlines(), start=1):
            raw_line = raw_line.strip()
            if not raw_line:
                continue
            try:
                document = VerificationDocument.from_json(raw_line)
            except KeyDecodingError as exc:
                raise ValueError(f"Invalid document on line {line_number}: {exc}") from exc
            self._check_method(document.id)
            with self._lock:
                if document.id in self._documents:
                    continue
                self._documents[document.id] = document
            added += 1
        logger.info("Imported %d document(s) for did:%s from %s", added, self.method, path)
        return added

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    def __contains__(self, did: object) -> bool:
        with self._lock:
            return did in self._documents

    def __repr__(self) -> str:
        return f"DocumentStoreStrategy(method={self.method!r}, documents={len(self)})"


__all__ = ["DocumentAlreadyRegisteredError", "DocumentStoreStrategy"]
