import uuid


class DocumentError(Exception):
    """Базовая ошибка домена документов"""


class NotAuthenticatedError(DocumentError):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class DocumentNotFoundError(DocumentError):
    def __init__(self, document_id: uuid.UUID):
        self.document_id = document_id
        super().__init__(f"Document {document_id} not found")


class UnauthorizedError(DocumentError, PermissionError):
    def __init__(self, document_id: uuid.UUID):
        self.document_id = document_id
        super().__init__(f"You don't have permission to access document {document_id}")
