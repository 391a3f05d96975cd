"""
全局异常处理模块 (Global Exception Handling Module)

定义设置存储的业务异常类和 FastAPI 全局异常处理器，提供统一的错误响应格式。
存储层异常（sqlalchemy.exc.SQLAlchemyError）不在此包装，原样向上传播。

Defines the settings store's business exception classes and the FastAPI global
exception handlers, providing a unified error response format. Storage errors
(sqlalchemy.exc.SQLAlchemyError) are not wrapped here and propagate unchanged.
"""
import logging
import traceback
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ============================================================
# 业务异常类 (Business Exception Classes)
# ============================================================

class BusinessError(Exception):
    """业务异常基类 (Base Business Exception)"""
    status_code: int = 400
    error: str = "business_error"

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class ValidationError(BusinessError):
    """设置聚合校验失败，写入前拒绝 (Aggregate validation failed, write rejected)"""
    status_code = 422
    error = "validation_error"


class SettingTypeError(BusinessError):
    """存储值无法转换为字段声明的类型 (Stored value does not fit the declared field type)"""
    status_code = 500
    error = "setting_type_error"

    def __init__(self, key: str, expected: str, value: str, reason: Optional[str] = None):
        self.key = key
        self.expected = expected
        self.value = value
        message = f"setting <{key}> expects {expected}, got {value!r}"
        super().__init__(message, reason)


class ConfigurationError(BusinessError):
    """设置项既无存储行也无默认值，或字段声明了不支持的类型 (Schema/programming defect)"""
    status_code = 500
    error = "configuration_error"


class SettingsWriteError(BusinessError):
    """批量写入部分失败，汇总每个失败的键 (Bulk write partially failed, every failed key collected)"""
    status_code = 500
    error = "settings_write_error"

    def __init__(self, errors: Dict[str, Exception]):
        self.errors = dict(errors)
        keys = ", ".join(self.errors)
        detail = "; ".join(f"{key}: {exc}" for key, exc in self.errors.items())
        super().__init__(f"failed to save settings: {keys}", detail)


# ============================================================
# 全局异常处理器注册 (Global Exception Handler Registration)
# ============================================================

def register_exception_handlers(app: FastAPI) -> None:
    """
    注册全局异常处理器到 FastAPI 应用 (Register global exception handlers to FastAPI app)

    处理优先级：
    1. BusinessError 子类 → 对应 HTTP 状态码 + 结构化响应
    2. HTTPException → 保持原样，包装为统一格式
    3. Exception → 500 + 完整 traceback 日志
    """

    @app.exception_handler(BusinessError)
    async def business_error_handler(request: Request, exc: BusinessError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error,
                "message": exc.message,
                "detail": exc.detail,
                "status_code": exc.status_code,
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "http_error",
                "message": str(exc.detail),
                "detail": None,
                "status_code": exc.status_code,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        # 记录完整 traceback 用于调试 (Log full traceback for debugging)
        logger.error(
            "Unhandled exception on %s %s: %s\n%s",
            request.method,
            request.url.path,
            str(exc),
            traceback.format_exc(),
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "服务器内部错误，请稍后重试 (Internal server error, please try again later)",
                "detail": None,
                "status_code": 500,
            },
        )
