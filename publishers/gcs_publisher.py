import logging
import os
import shutil
import subprocess
from typing import List

from .base import BasePublisher
from errors import PublishError
from models import PublishResult

logger = logging.getLogger(__name__)


class GcsPublisher(BasePublisher):
    """
    [V5.0] Google Cloud Storage 发布实现 (封装 gcloud CLI)
    - 使用服务账号密钥文件鉴权
    - 上传到固定 bucket，访问权限由 bucket 的 IAM 策略控制
    """

    @property
    def name(self) -> str:
        return "Google Cloud Storage"

    @property
    def bucket(self) -> str:
        return self.global_config.gcs_bucket

    def object_uri(self) -> str:
        return f"gs://{self.bucket}/{self.context.output_filename}"

    def access_url(self) -> str:
        host = self.global_config.storage_host
        return f"https://{host}/{self.bucket}/{self.context.output_filename}"

    def is_enabled(self) -> bool:
        # gcloud 已安装且配置了服务账号密钥
        has_sdk = shutil.which("gcloud") is not None
        has_key = bool(self.global_config.credentials.gcs_key_path)
        return has_sdk and has_key

    def publish(self, report_path: str) -> PublishResult:
        logger.info("=" * 50)
        logger.info(f"🚀 步骤 3: 上传到 {self.name}")
        logger.info("=" * 50)

        key_path = self.global_config.credentials.gcs_key_path
        if not key_path:
            raise PublishError("未配置 GCS_SERVICE_ACCOUNT_KEY_PATH，无法鉴权。")

        logger.info("🔑 正在使用 GCS 服务账号鉴权...")
        if not self._run_gcloud(
            ["auth", "activate-service-account", f"--key-file={key_path}"]
        ):
            raise PublishError("GCS 鉴权失败。请检查服务账号密钥。")

        destination = f"gs://{self.bucket}/"
        logger.info(f"📤 正在上传 {report_path} 到 {destination} ...")
        if not self._run_gcloud(["storage", "cp", report_path, destination]):
            raise PublishError("上传到 GCS 失败。请检查权限与 bucket 名称。")

        result = PublishResult(
            uri=self.object_uri(), url=self.access_url(), success=True
        )
        logger.info(f"✅ 已成功上传至 {result.uri}")
        print(f"Link : {result.url}")

        logger.info(f"🧹 正在删除本地 CSV 文件: {report_path}")
        os.remove(report_path)
        return result

    def _run_gcloud(self, args: List[str]) -> bool:
        cmd = ["gcloud", *args]
        try:
            result = subprocess.run(cmd, check=False)
        except OSError as e:
            logger.error(f"❌ 无法执行 gcloud: {e}")
            return False
        if result.returncode != 0:
            logger.error(f"❌ gcloud 命令失败 (退出码 {result.returncode}): {' '.join(args[:2])}")
            return False
        return True
