from abc import ABC, abstractmethod

from models import SummaryArtifact


class Summarizer(ABC):
    """
    [V5.0] 仓库摘要工具的抽象基类
    把整个仓库目录压缩为一个文本文件，供 AI 分析。
    屏蔽具体工具 (repomix 等) 的调用细节，测试中可替换为假实现。
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """返回摘要工具的名称 (日志显示用)"""
        pass

    @abstractmethod
    def summarize(self, repo_path: str) -> SummaryArtifact:
        """
        在 repo_path 内生成摘要文件。
        :param repo_path: 工作区中的仓库根目录 (工具只能访问此目录)
        :return: 摘要文件
        :raises SummarizationError: 运行后未找到预期的输出文件
        """
        pass
