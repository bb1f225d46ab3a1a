# credentials.py
import logging
import os

from errors import CredentialError
from models import Credentials

logger = logging.getLogger(__name__)


def validate_credentials(credentials: Credentials) -> None:
    """
    (V5.0) 在任何克隆或网络调用之前校验密钥。
    - GITHUB_TOKEN 与 GEMINI_API_KEY 必填
    - 若设置了 GCS_SERVICE_ACCOUNT_KEY_PATH，则文件必须存在 (立即失败，不推迟到上传阶段)
    """
    if not credentials.github_token:
        raise CredentialError(
            "GITHUB_TOKEN 环境变量未设置。请在 .env 中配置或手动 export。"
        )

    if not credentials.gemini_api_key:
        raise CredentialError(
            "GEMINI_API_KEY 环境变量未设置。请在 .env 中配置或手动 export。"
        )

    if credentials.gcs_key_path and not os.path.isfile(credentials.gcs_key_path):
        raise CredentialError(
            f"已设置 GCS_SERVICE_ACCOUNT_KEY_PATH，但文件不存在: {credentials.gcs_key_path}"
        )

    if credentials.gcs_key_path:
        logger.info("✅ 凭证校验通过 (已配置 GCS 服务账号，将上传报告)")
    else:
        logger.info("✅ 凭证校验通过 (未配置 GCS 服务账号，报告仅保存在本地)")
