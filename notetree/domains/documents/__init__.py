from notetree.domains.documents.entities import Document
from notetree.domains.documents.errors import (
    DocumentError, NotAuthenticatedError, DocumentNotFoundError, UnauthorizedError
)
from notetree.domains.documents.schemas import (
    DocumentCreate, DocumentUpdate, DocumentResponse, PropagationJobResponse
)
from notetree.domains.documents.propagation import PropagationJob, PropagationQueue, PropagationStatus
from notetree.domains.documents.queries import DocumentQueryService
from notetree.domains.documents.tree import TreeMutator
from notetree.domains.documents.services import DocumentService

__all__ = [
    "Document",
    "DocumentError", "NotAuthenticatedError", "DocumentNotFoundError", "UnauthorizedError",
    "DocumentCreate", "DocumentUpdate", "DocumentResponse", "PropagationJobResponse",
    "PropagationJob", "PropagationQueue", "PropagationStatus",
    "DocumentQueryService", "TreeMutator",
    "DocumentService"
]
