# app/api/users/main.py
from fastapi import APIRouter, Depends

from ...core.users import Principal, get_principal
from ...schemas.user import PrincipalRead

router = APIRouter()


@router.get("/me", response_model=PrincipalRead)
def api_get_me(principal: Principal = Depends(get_principal)):
    return principal
