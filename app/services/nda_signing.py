"""Embedded NDA signing sessions.

An investor opening the NDA for an opportunity gets a PandaDoc signing URL.
The document is created from the NDA template with the metadata the webhook
later reads back (``userId``, ``opportunityId``, ``opportunityType``). An open
document for the same investor and opportunity is reused instead of creating
a second one.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.constants import DOCUMENT_DRAFT, DOCUMENT_SENT, DOCUMENT_VIEWED
from app.crud.interest import interest as crud_interest
from app.crud.opportunity import opportunity as crud_opportunity
from app.models.user import User
from app.schemas.opportunity import OpportunityRef
from app.schemas.pandadoc import CreateDocumentInput, Document, DocumentToken, NdaSigningSession
from app.services.pandadoc import PandaDocService

logger = logging.getLogger(__name__)

OPEN_DOCUMENT_STATUSES = {DOCUMENT_DRAFT, DOCUMENT_SENT, DOCUMENT_VIEWED}


class NdaSigningUnavailableError(Exception):
    pass


class NdaAlreadySignedError(Exception):
    pass


class NdaSigningService:
    def __init__(self, pandadoc: PandaDocService, template_id: str, draft_poll_interval: float = 1.0):
        self.pandadoc = pandadoc
        self.template_id = template_id
        self.draft_poll_interval = draft_poll_interval

    @staticmethod
    def document_name(opportunity_name: str, user: User) -> str:
        return f"NDA - {opportunity_name} - {user.email}"

    async def _find_open_document(self, name: str) -> Optional[Document]:
        for document in await self.pandadoc.list_documents(name):
            if document.name == name and document.status in OPEN_DOCUMENT_STATUSES:
                return document
        return None

    async def _create_document(self, name: str, opportunity_name: str, user: User, ref: OpportunityRef) -> Document:
        document = await self.pandadoc.create_document_from_template(CreateDocumentInput(
            template_id=self.template_id,
            name=name,
            recipient_email=user.email,
            recipient_name=user.name or user.email,
            metadata={
                "userId": user.id,
                "opportunityId": ref.id,
                "opportunityType": ref.kind.value,
            },
            tokens=[
                DocumentToken(name="Investor.Name", value=user.name or user.email),
                DocumentToken(name="Opportunity.Name", value=opportunity_name),
            ],
        ))
        logger.info(f"[NDA] Created document {document.id} for user {user.id} on {ref.kind.value} {ref.id}")
        return await self.pandadoc.wait_for_document_draft(document.id, interval=self.draft_poll_interval)

    async def start_session(self, db: Session, *, user: User, ref: OpportunityRef) -> NdaSigningSession:
        """Return a signing URL for the user's NDA on this opportunity.

        Raises NdaSigningUnavailableError when no template is configured,
        NdaAlreadySignedError when the interest record already has a signed
        NDA, and PandaDocError for provider failures.
        """
        if not self.template_id:
            raise NdaSigningUnavailableError("NDA signing is not configured")

        existing = crud_interest.get_by_natural_key(db, user_id=user.id, ref=ref)
        if existing is not None and existing.nda_signed:
            raise NdaAlreadySignedError("NDA already signed for this opportunity")

        opportunity_name = crud_opportunity.get_name(db, ref=ref) or "opportunity"
        name = self.document_name(opportunity_name, user)

        document = await self._find_open_document(name)
        if document is None:
            document = await self._create_document(name, opportunity_name, user, ref)
        if document.status == DOCUMENT_DRAFT:
            await self.pandadoc.send_document(document.id)

        session = await self.pandadoc.create_signing_session(document.id, user.email)
        return NdaSigningSession(
            document_id=document.id,
            signing_url=self.pandadoc.get_signing_url(session.id),
            expires_at=session.expires_at,
        )
