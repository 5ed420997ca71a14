# casenotes/api/v1/auth.py
from fastapi import APIRouter, Depends
from casenotes.core.dependencies import get_current_user
from casenotes.schemas.user import UserOut

router = APIRouter()


@router.get("/user", response_model=UserOut)
def read_current_user(current_user=Depends(get_current_user)):
    return current_user
