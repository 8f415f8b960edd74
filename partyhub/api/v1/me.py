from fastapi import APIRouter

from partyhub.api.responses import paginated_response, success_response
from partyhub.api.v1.schemas.parties import NotificationOut, UserSummaryOut
from partyhub.auth.deps import CurrentUser, DBSession
from partyhub.core.config import settings
from partyhub.services.notifications import list_notifications

router = APIRouter(prefix="/me", tags=["me"])


@router.get("")
def me(user: CurrentUser):
    return success_response({"user": UserSummaryOut.model_validate(user).model_dump(mode="json")})


@router.get("/notifications")
def my_notifications(
    user: CurrentUser,
    db: DBSession,
    page: int = 1,
    limit: int = settings.default_page_size,
):
    rows, total = list_notifications(db, user.id, page, limit)
    items = [NotificationOut.model_validate(row).model_dump(mode="json") for row in rows]
    return paginated_response(items, page, limit, total)
