"""
设置变更遥测上报 (Settings Change Telemetry)

把设置变更以 Firestore 文档格式异步上报到远端统计端点。上报是尽力而为的旁路：
调用方只把事件放进有界队列，队列满时直接丢弃；由后台 worker 逐个发送，
发送失败只记日志，永远不会影响设置读写本身的结果。

Best-effort, fire-and-forget reporting of settings changes. Callers only drop
an event into a bounded queue (events are discarded when it is full); a single
background worker posts them with a short timeout and logs every failure.
"""
import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import httpx

from xpanel.core.config import settings

logger = logging.getLogger(__name__)

# 上报前需要脱敏的键 (Keys masked before reporting)
SENSITIVE_KEYS = frozenset({"secret"})
MASK = "******"


@dataclass
class SettingEvent:
    """一条待上报的变更：文档名前缀与字段。"""
    name: str
    fields: Dict[str, Any]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def to_firestore_value(value: Any) -> Dict[str, str]:
    """int 编码为 integerValue，其余一律按字符串编码为 stringValue。"""
    if isinstance(value, int) and not isinstance(value, bool):
        return {"integerValue": str(value)}
    if isinstance(value, str):
        return {"stringValue": value}
    return {"stringValue": str(value)}


def _mask(key: str, value: Any) -> Any:
    return MASK if key in SENSITIVE_KEYS else value


class SettingNotifier:
    """
    基于有界内存队列的设置变更上报器。

    notify_change / notify_bulk 不等待、不抛异常；start() 启动后台 worker，
    stop() 取消它。telemetry_url 为空时上报关闭，事件不入队。
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        maxsize: Optional[int] = None,
    ):
        self.url = (settings.telemetry_url if url is None else url).rstrip("/")
        self.timeout = settings.telemetry_timeout if timeout is None else timeout
        self.queue: asyncio.Queue = asyncio.Queue(
            maxsize=settings.telemetry_queue_size if maxsize is None else maxsize
        )
        self._task: Optional[asyncio.Task] = None

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def notify_change(self, key: str, value: Any) -> None:
        """上报单个键的新值。"""
        self._enqueue(SettingEvent(key, {key: _mask(key, value), "operation": "setting_update"}))

    def notify_bulk(self, values: Mapping[str, Any]) -> None:
        """上报整份设置快照（批量更新成功后调用）。"""
        fields = {key: _mask(key, value) for key, value in values.items()}
        total = len(fields)
        fields["operation"] = "bulk_settings_update"
        fields["total_settings"] = total
        self._enqueue(SettingEvent("bulk_update", fields))

    def _enqueue(self, event: SettingEvent) -> None:
        if not self.enabled:
            return
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("Telemetry queue full, dropping event %s", event.name)

    def start(self) -> None:
        """在当前事件循环中启动后台发送任务。"""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
            logger.info("Settings telemetry worker started")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        while True:
            event = await self.queue.get()
            try:
                await self.deliver(event)
            except Exception:
                logger.exception("Failed to upload setting event %s", event.name)
            finally:
                self.queue.task_done()

    async def deliver(self, event: SettingEvent) -> bool:
        """发送一条事件，返回是否收到 2xx。网络异常向上抛给 worker 记录。"""
        fields = dict(event.fields)
        fields["timestamp"] = event.created_at.isoformat()
        document = {"fields": {key: to_firestore_value(value) for key, value in fields.items()}}
        url = f"{self.url}/{event.name}_{int(event.created_at.timestamp())}"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(url, json=document, headers={"Content-Type": "application/json"})

        if 200 <= resp.status_code < 300:
            logger.info("Uploaded setting event %s", event.name)
            return True
        logger.warning("Failed to upload setting event %s, status code: %d", event.name, resp.status_code)
        return False


# 全局上报器实例，由应用 lifespan 启停 (Global notifier, started/stopped by the app lifespan)
setting_notifier = SettingNotifier()
