"""Per-project document cache and the user actions on it.

The server owns every document. The workspace keeps the subset returned for
one project and changes its local copy only after the server accepted the
change.
"""

import os
from typing import Dict, List, Optional, TYPE_CHECKING

from keyveve import Keyveve
from api import APIError, DOC_CATEGORIES, DOC_STATUSES, STORAGE_LOCATIONS
from .classifier import assign_folders, classify, organize_documents

if TYPE_CHECKING:
    from api import Document, PortalClient, Project


class DocumentWorkspace:
    """Documents of one project, grouped by the project's service category."""

    def __init__(self, client: "PortalClient", project: "Project") -> None:
        self.client = client
        self.project = project
        self.docs: List["Document"] = list(project.docs)
        assign_folders(self.docs, self.service_category)

    @property
    def service_category(self) -> Optional[str]:
        return self.project.service_type

    def _find(self, doc_id: str) -> "Document":
        for doc in self.docs:
            if doc.doc_id == doc_id:
                return doc
        raise KeyError(f"Unknown document: {doc_id}")

    def replace_project(self, project: "Project") -> None:
        """Adopt a freshly fetched project record and its documents."""
        self.project = project
        self.docs = list(project.docs)
        assign_folders(self.docs, self.service_category)

    def load(self) -> bool:
        """Fetch the project's documents from the server.

        Returns:
            True on success; on failure the previous list is kept
        """
        try:
            docs = self.client.list_documents(self.project.id)
        except APIError as e:
            Keyveve.print_right(f"[red]Error loading documents: {e}[/red]")
            Keyveve.notify("Error loading documents", str(e), variant="destructive")
            return False

        assign_folders(docs, self.service_category)
        self.docs = docs
        return True

    def choose_title(self, doc_id: str, accept: bool) -> bool:
        """Accept or dismiss the AI-suggested title of a document.

        Accepting stores the suggestion as the final name; dismissing stores
        the original file name.

        Args:
            doc_id: Document to rename
            accept: True to take the suggestion, False to keep the original

        Returns:
            True if the server accepted the rename
        """
        doc = self._find(doc_id)
        new_name = doc.suggested_name if accept and doc.suggested_name else doc.original_name

        try:
            self.client.rename_document(doc_id, new_name)
        except APIError as e:
            Keyveve.print_right(f"[red]Error renaming {doc.display_name}: {e}[/red]")
            Keyveve.notify("Rename failed", str(e), variant="destructive")
            return False

        doc.final_name = new_name
        Keyveve.notify("Title accepted" if accept else "Suggestion dismissed", new_name)
        return True

    def set_status(self, doc_id: str, status: str) -> bool:
        """Set a document's lifecycle status.

        Any status can follow any other; only unknown values are refused.

        Raises:
            ValueError: If status is not one of DOC_STATUSES
        """
        if status not in DOC_STATUSES:
            raise ValueError(
                f"Unknown document status: {status}. "
                f"Must be one of: {', '.join(DOC_STATUSES)}"
            )

        doc = self._find(doc_id)
        try:
            self.client.update_document_status(doc_id, status)
        except APIError as e:
            Keyveve.print_right(f"[red]Error updating {doc.display_name}: {e}[/red]")
            Keyveve.notify("Status update failed", str(e), variant="destructive")
            return False

        doc.status = status
        return True

    def upload(self, file_path: str, storage_location: str = "keyveve",
               doc_category: str = "client") -> Optional["Document"]:
        """Upload a local file to the project.

        Args:
            file_path: Path to the local file
            storage_location: One of STORAGE_LOCATIONS
            doc_category: One of DOC_CATEGORIES

        Returns:
            The new document (already placed in a folder), or None on failure

        Raises:
            FileNotFoundError: If file_path does not exist
            ValueError: If storage_location or doc_category is unknown
        """
        if not os.path.isfile(file_path):
            raise FileNotFoundError(f"Upload file not found: {file_path}")
        if storage_location not in STORAGE_LOCATIONS:
            raise ValueError(f"Unknown storage location: {storage_location}")
        if doc_category not in DOC_CATEGORIES:
            raise ValueError(f"Unknown document category: {doc_category}")

        filename = os.path.basename(file_path)
        Keyveve.print_right(f"Uploading: {filename}")
        try:
            doc = self.client.upload_document(
                self.project.id, file_path,
                storage_location=storage_location,
                doc_category=doc_category,
            )
        except APIError as e:
            Keyveve.print_right(f"[red]Error uploading {filename}: {e}[/red]")
            Keyveve.notify("Upload failed", "There was an error uploading your document.",
                           variant="destructive")
            return None

        doc.folder = classify(doc, self.service_category)
        self.docs.append(doc)
        Keyveve.notify("Document uploaded",
                       "Your document has been uploaded and is being processed.")
        return doc

    def upload_folder(self, folder_path: str, storage_location: str = "keyveve",
                      doc_category: str = "client") -> List["Document"]:
        """Upload every file below a local folder, recursively.

        Hidden files are skipped. Failures of single files do not stop the
        rest of the folder.
        """
        if not os.path.isdir(folder_path):
            raise FileNotFoundError(f"Upload folder not found: {folder_path}")

        uploaded = []
        for root, dirs, files in os.walk(folder_path):
            dirs[:] = sorted(d for d in dirs if not d.startswith('.'))
            for filename in sorted(files):
                if filename.startswith('.'):
                    continue
                doc = self.upload(os.path.join(root, filename),
                                  storage_location=storage_location,
                                  doc_category=doc_category)
                if doc is not None:
                    uploaded.append(doc)
        return uploaded

    def search(self, term: str) -> List["Document"]:
        """Case-insensitive match on names, type and extracted text."""
        needle = term.strip().lower()
        if not needle:
            return list(self.docs)
        return [
            doc for doc in self.docs
            if needle in (doc.original_name or "").lower()
            or needle in (doc.final_name or "").lower()
            or needle in (doc.doc_type or "").lower()
            or needle in (doc.extracted_data or "").lower()
        ]

    def by_storage(self, storage_location: str) -> List["Document"]:
        return [doc for doc in self.docs if doc.storage_location == storage_location]

    def pending_suggestions(self) -> List["Document"]:
        """Documents with an AI title the user has not decided on yet."""
        return [doc for doc in self.docs if doc.has_pending_suggestion]

    def organized(self) -> Dict[str, List["Document"]]:
        return organize_documents(self.docs, self.service_category)
