from fastapi import APIRouter, Depends

from app.core.context import AppContext, get_context
from app.core.security import authenticate_admin
from app.models.api_models import LoginRequest, TokenResponse

router = APIRouter()

@router.post("/admin/login", response_model=TokenResponse)
async def admin_login(req: LoginRequest, ctx: AppContext = Depends(get_context)):
    token = authenticate_admin(ctx, req.email, req.password)
    return {"token": token}
