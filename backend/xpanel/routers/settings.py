"""
面板设置路由 (Panel Settings Router)

API端点：GET /api/v1/settings, PUT /api/v1/settings, POST /api/v1/settings/reset
（实际路径带有 webBasePath 前缀）。
"""
from fastapi import APIRouter, Depends

from xpanel.core.deps import get_setting_service, verify_panel_token
from xpanel.schemas.setting import AllSetting
from xpanel.services.setting_service import SettingService

router = APIRouter(prefix="/api/v1/settings", tags=["settings"], dependencies=[Depends(verify_panel_token)])


@router.get("")
async def get_settings(service: SettingService = Depends(get_setting_service)):
    """
    获取全部面板设置 (Get All Panel Settings)

    数据库中没有的设置项自动使用默认值补充，返回以外部键名为字段的完整设置。
    """
    all_setting = await service.get_all_setting()
    return all_setting.to_external()


@router.put("")
async def update_settings(
    data: AllSetting,
    service: SettingService = Depends(get_setting_service),
):
    """
    批量更新面板设置 (Batch Update Panel Settings)

    校验失败返回 422 且不写入任何设置；部分键保存失败返回 500，detail 中列出所有失败的键。
    监听地址、端口、证书和基础路径在面板重启后生效。
    """
    await service.update_all_setting(data)
    return {"status": "ok"}


@router.post("/reset")
async def reset_settings(service: SettingService = Depends(get_setting_service)):
    """删除全部设置，恢复默认值 (Reset all settings to defaults)"""
    await service.reset_settings()
    return {"status": "ok"}
