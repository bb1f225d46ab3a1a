from typing import List
import logging
from context import RunContext
from .base import BasePublisher
from .gcs_publisher import GcsPublisher

# --- 在这里注册新的发布渠道 ---
AVAILABLE_PUBLISHER_CLASSES = [
    GcsPublisher,
]

logger = logging.getLogger(__name__)


def get_active_publishers(context: RunContext) -> List[BasePublisher]:
    """
    工厂方法：实例化并返回所有前置条件已满足的发布渠道。
    返回空列表表示进入降级模式 (仅保存本地文件)。
    """
    active_list = []
    for publisher_cls in AVAILABLE_PUBLISHER_CLASSES:
        publisher = publisher_cls(context)
        if publisher.is_enabled():
            active_list.append(publisher)
            logger.info(f"🔌 已激活发布渠道: {publisher.name}")
        else:
            logger.info(f"ℹ️ 发布渠道未启用: {publisher.name}")
    return active_list
