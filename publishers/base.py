from abc import ABC, abstractmethod
import logging

from context import RunContext
from models import PublishResult

logger = logging.getLogger(__name__)


class BasePublisher(ABC):
    """
    [V5.0] 报告发布渠道抽象基类
    所有具体的发布方式都必须继承此类。
    """

    def __init__(self, context: RunContext):
        """
        初始化发布器，接收运行时上下文。
        """
        self.context = context
        self.global_config = context.global_config

    @property
    @abstractmethod
    def name(self) -> str:
        """返回发布渠道的名称 (日志显示用)"""
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """
        判断发布前置条件是否满足。
        不满足时流水线进入降级模式：跳过发布，本地文件作为最终产物。
        """
        pass

    @abstractmethod
    def publish(self, report_path: str) -> PublishResult:
        """
        上传报告，成功后删除本地副本。
        :param report_path: 本地报告文件的路径
        :return: 远程对象地址与访问链接
        :raises PublishError: 鉴权或上传失败 (本地文件保留以便诊断)
        """
        pass
