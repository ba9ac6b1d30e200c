from app.crud.base import CRUDBase
from app.models.access_request import AccessRequest
from app.schemas.access_request import AccessRequestCreate

class CRUDAccessRequest(CRUDBase[AccessRequest, AccessRequestCreate, AccessRequestCreate]):
    pass

access_request = CRUDAccessRequest(AccessRequest)
