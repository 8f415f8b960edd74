from fastapi import APIRouter

from partyhub.api.v1.me import router as me_router
from partyhub.api.v1.media import router as media_router
from partyhub.api.v1.parties import router as parties_router
from partyhub.api.v1.users import router as users_router

router = APIRouter()
router.include_router(parties_router)
router.include_router(media_router)
router.include_router(users_router)
router.include_router(me_router)
