import logging
import os
import subprocess

from .base import Summarizer
from config import GlobalConfig
from errors import SummarizationError
from models import ExclusionPolicy, SummaryArtifact

logger = logging.getLogger(__name__)


class RepomixSummarizer(Summarizer):
    """
    [V5.0] 通过 `npx repomix` 生成仓库摘要
    - 先在仓库根目录写入 repomix.config.json (排除规则 + 输出文件名)
    - 运行前删除残留的输出文件；退出码非 0 或未产出文件都视为失败
    """

    def __init__(self, global_config: GlobalConfig):
        self.global_config = global_config
        self.package = global_config.summarizer_package
        self.output_filename = global_config.summary_filename
        self.config_filename = global_config.summarizer_config_filename
        self.exclusion_policy: ExclusionPolicy = global_config.exclusion_policy

    @property
    def name(self) -> str:
        return f"repomix ({self.package})"

    def write_config(self, repo_path: str) -> str:
        config_path = os.path.join(repo_path, self.config_filename)
        logger.info(f"📝 正在创建 repomix 配置: {config_path}")
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(self.exclusion_policy.to_repomix_config(self.output_filename))
        return config_path

    def summarize(self, repo_path: str) -> SummaryArtifact:
        self.write_config(repo_path)

        # 复用的工作区可能残留上一次运行的摘要，必须先删除
        output_path = os.path.join(repo_path, self.output_filename)
        if os.path.exists(output_path):
            logger.info(f"🧹 删除残留的摘要文件: {output_path}")
            os.remove(output_path)

        logger.info(f"🔍 正在运行 'npx {self.package}' ...")
        try:
            # cwd 限定在仓库目录内，不改变当前进程的工作目录
            result = subprocess.run(
                ["npx", "--yes", self.package],
                cwd=repo_path,
                check=False,
            )
        except OSError as e:
            raise SummarizationError(f"无法启动 npx: {e}") from e

        if result.returncode != 0:
            raise SummarizationError(
                f"repomix 运行失败 (退出码 {result.returncode})"
            )

        if not os.path.isfile(output_path):
            raise SummarizationError(
                f"运行 repomix 后未找到 {self.output_filename}: {output_path}"
            )

        artifact = SummaryArtifact(path=output_path)
        logger.info(
            f"✅ '{self.output_filename}' 生成成功 ({artifact.size_bytes} bytes)"
        )
        return artifact
