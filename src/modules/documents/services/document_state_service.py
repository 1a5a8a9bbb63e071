import logging

from modules.common.errors import InvalidStateError, ValidationError
from modules.documents.models.document import Document, DocumentStatus

logger = logging.getLogger(__name__)

# draft: not yet open for signing, active: open for signing, archived: closed
SIGNABLE_STATES = {DocumentStatus.ACTIVE}


class DocumentStateService:
    """Document status rules.

    Transitions are not restricted: an authorized update may move a document
    to any status, archived -> active included. Only signing depends on the
    current status.
    """

    @staticmethod
    def is_signable(document: Document) -> bool:
        return document.status in SIGNABLE_STATES

    @staticmethod
    def ensure_signable(document: Document) -> None:
        if not DocumentStateService.is_signable(document):
            raise InvalidStateError(
                f"Document is not available for signing (status: {document.status.value})"
            )

    @staticmethod
    def change_document_status(document: Document, new_status) -> Document:
        """Set the status of a document; the caller commits."""
        try:
            new_status = DocumentStatus(new_status)
        except ValueError:
            raise ValidationError(f"Invalid status '{new_status}'")

        previous_status = document.status
        document.status = new_status
        if previous_status != new_status:
            logger.info(
                "Document %s changed from %s to %s",
                document.id, previous_status.value if previous_status else None, new_status.value,
            )
        return document
