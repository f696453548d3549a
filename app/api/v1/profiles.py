from fastapi import APIRouter, Depends

from app.api.deps import get_current_profile
from app.schemas.profile import ProfileRead

router = APIRouter()


@router.get("/me", response_model=ProfileRead)
async def read_my_profile(caller: ProfileRead = Depends(get_current_profile)):
    return caller
