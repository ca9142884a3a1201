from typing import Annotated
from fastapi import APIRouter, Depends
from parity.api.deps import get_current_user
from parity.schemas.user import UserResponse
from parity.models.user import User

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def details(current_user: Annotated[User, Depends(get_current_user)]):
    return current_user
