# errors.py
"""
[V5.0] 审计流水线的异常分类
每个阶段只抛出属于自己的异常，由 cli 统一捕获并以非零状态退出。
"""


class AuditError(Exception):
    """所有致命错误的基类"""

    pass


class UsageError(AuditError):
    """命令行参数缺失或非法"""

    pass


class ConfigurationError(AuditError):
    """配置项非法或内置资源缺失 (例如提示词模板)"""

    pass


class DependencyError(AuditError):
    """外部工具缺失且无法自动安装"""

    pass


class CredentialError(AuditError):
    """密钥缺失，或密钥文件路径不存在"""

    pass


class AcquisitionError(AuditError):
    """克隆仓库失败 (鉴权、网络、仓库不存在)"""

    pass


class SummarizationError(AuditError):
    """摘要工具运行后未产出预期文件"""

    pass


class TransportError(AuditError):
    """AI 调用未收到任何 HTTP 响应"""

    pass


class ApplicationError(AuditError):
    """
    AI 服务返回了非 200 状态码。
    原始响应体被完整保留，便于诊断。
    """

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"AI 服务返回 HTTP {status_code}。原始响应: {body}")


class ContentError(AuditError):
    """调用成功，但提取到的文本为空或为 null"""

    pass


class PublishError(AuditError):
    """云存储鉴权或上传失败"""

    pass


class QualityWarning(UserWarning):
    """
    清洗后的报告只有表头或为空。
    这表示仓库中没有找到相关配置，不是流水线故障，运行继续。
    """

    pass
