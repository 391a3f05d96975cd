"""
FastAPI 依赖项模块 (FastAPI Dependencies Module)

提供设置服务的依赖注入和面板令牌校验。
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from xpanel.core.database import get_db
from xpanel.core.security import decode_token
from xpanel.services.setting_service import SettingService

# Bearer Token 认证方案 (Bearer Token Authentication Scheme)
security = HTTPBearer()


async def get_setting_service(db: AsyncSession = Depends(get_db)) -> SettingService:
    """每个请求一个 SettingService。"""
    return SettingService(db)


async def verify_panel_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    service: SettingService = Depends(get_setting_service),
) -> dict:
    """校验 Bearer Token 是否由当前面板 secret 签发，返回令牌载荷。"""
    payload = decode_token(credentials.credentials, await service.get_secret())
    if payload is None or payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return payload
