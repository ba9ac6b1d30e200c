import asyncio
import httpx
from typing import Any, List, Optional

from app.core.config import Settings
from app.core.constants import DOCUMENT_UPLOADED
from app.schemas.pandadoc import CreateDocumentInput, Document, SigningSession


class PandaDocError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class PandaDocService:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.PANDADOC_BASE_URL.rstrip("/")
        self.signing_base_url = settings.PANDADOC_SIGNING_BASE_URL.rstrip("/")
        self.api_key = settings.PANDADOC_API_KEY
        self.nda_subject = settings.PANDADOC_NDA_SUBJECT
        self._transport = transport

    async def _make_request(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None) -> Any:
        headers = {
            "Authorization": f"API-Key {self.api_key}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(base_url=self.base_url, timeout=10.0, transport=self._transport) as client:
            try:
                response = await client.request(method, path, json=json, params=params, headers=headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise PandaDocError(
                    f"PandaDoc API error {e.response.status_code}: {e.response.reason_phrase} - {e.response.text}",
                    status_code=e.response.status_code,
                    body=e.response.text,
                ) from e
            except httpx.RequestError as e:
                raise PandaDocError(f"PandaDoc network error: {e}") from e

            if not response.content:
                return None
            return response.json()

    async def create_document_from_template(self, document_in: CreateDocumentInput) -> Document:
        first_name, _, last_name = document_in.recipient_name.partition(" ")
        data = await self._make_request("POST", "/documents", json={
            "template_uuid": document_in.template_id,
            "name": document_in.name,
            "recipients": [
                {
                    "email": document_in.recipient_email,
                    "first_name": first_name or document_in.recipient_name,
                    "last_name": last_name,
                    "role": "Signer",
                }
            ],
            "tokens": [token.model_dump() for token in document_in.tokens],
            "metadata": document_in.metadata,
        })
        return Document.model_validate(data)

    async def get_document_details(self, document_id: str) -> Document:
        data = await self._make_request("GET", f"/documents/{document_id}")
        return Document.model_validate(data)

    async def send_document(self, document_id: str) -> None:
        await self._make_request("POST", f"/documents/{document_id}/send", json={
            "silent": True,
            "subject": self.nda_subject,
        })

    async def create_signing_session(self, document_id: str, recipient_email: str) -> SigningSession:
        data = await self._make_request(
            "POST", f"/documents/{document_id}/session", json={"recipient": recipient_email}
        )
        return SigningSession.model_validate(data)

    async def list_documents(self, query: str) -> List[Document]:
        data = await self._make_request("GET", "/documents", params={"q": query})
        return [Document.model_validate(item) for item in (data or {}).get("results", [])]

    async def wait_for_document_draft(self, document_id: str, max_attempts: int = 10, interval: float = 1.0) -> Document:
        """Poll until the document leaves the uploaded state."""
        for _ in range(max_attempts):
            document = await self.get_document_details(document_id)
            if document.status != DOCUMENT_UPLOADED:
                return document
            await asyncio.sleep(interval)
        raise PandaDocError("Document did not reach draft status in time")

    def get_signing_url(self, session_id: str) -> str:
        return f"{self.signing_base_url}/{session_id}"
