from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.core.database import get_db
from app.core.security import decode_access_token
from app.crud.user import user as user_crud
from app.models.user import User
from app.realtime.broadcaster import RealtimeBroadcaster
from app.services.nda_signing import NdaSigningService
from app.services.nda_webhook import NdaWebhookService
from app.services.notification import NotificationService
from app.utils.service_registry import ServiceRegistry

http_bearer = HTTPBearer()

def get_services(request: Request) -> ServiceRegistry:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Services are not initialised")
    return services

def get_notification_service(services: ServiceRegistry = Depends(get_services)) -> NotificationService:
    return services.notification

def get_broadcaster(services: ServiceRegistry = Depends(get_services)) -> RealtimeBroadcaster:
    return services.broadcaster

def get_nda_webhook_service(services: ServiceRegistry = Depends(get_services)) -> NdaWebhookService:
    return services.nda_webhook

def get_nda_signing_service(services: ServiceRegistry = Depends(get_services)) -> NdaSigningService:
    return services.nda_signing

async def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(http_bearer)
) -> User:
    try:
        payload = decode_access_token(credentials.credentials)
        user_id: str = payload.get("sub")
        if user_id is None:
            raise HTTPException(status_code=401, detail="Invalid token")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = user_crud.get(db, id=user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if user.disabled:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is disabled")
    return user

def require_roles(*roles: RoleEnum):
    """Dependency that only lets users with one of `roles` through."""
    def _verify_role(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action."
            )
        return user
    return _verify_role
