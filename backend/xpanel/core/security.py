"""
令牌签发模块 (Token Signing Module)

面板接口使用 HS256 JWT 鉴权，签名密钥就是设置表中的面板 secret（见 SettingService.get_secret），
令牌有效期取自 sessionMaxAge 设置。

Panel endpoints authenticate with HS256 JWTs signed with the panel secret stored
in the settings table; token lifetime comes from the sessionMaxAge setting.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

ALGORITHM = "HS256"


def create_access_token(subject: str, secret: bytes, max_age: Optional[timedelta] = None) -> str:
    """
    生成访问令牌 (Generate access token)

    Args:
        subject (str): 令牌主体，通常为管理员名 (Token subject, usually the admin name)
        secret (bytes): 面板签名密钥 (Panel signing secret)
        max_age (timedelta | None): 有效期；为空或为 0 时不设置 exp (No exp claim when empty or zero)

    Returns:
        str: JWT 访问令牌字符串 (JWT access token string)
    """
    claims = {"sub": subject, "type": "access"}
    if max_age:
        claims["exp"] = datetime.now(timezone.utc) + max_age
    return jwt.encode(claims, secret.decode(), algorithm=ALGORITHM)


def decode_token(token: str, secret: bytes) -> dict | None:
    """解析 JWT 令牌，签名无效或已过期时返回 None (Decode JWT token, None on failure)"""
    try:
        return jwt.decode(token, secret.decode(), algorithms=[ALGORITHM])
    except JWTError:
        return None
