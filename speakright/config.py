"""
SpeakRight 配置模块
从 .env 文件加载所有配置项，提供全局单例 settings
"""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Settings:
    """全局配置"""

    # 服务
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8900"))

    # LLM (OpenAI 兼容接口，默认 Moonshot)
    llm_api_key: str = os.getenv("LLM_API_KEY", os.getenv("MOONSHOT_API_KEY", ""))
    llm_base_url: str = os.getenv("LLM_BASE_URL", "https://api.moonshot.cn/v1")
    llm_model: str = os.getenv("LLM_MODEL", "moonshot-v1-8k")
    llm_temperature: float = float(os.getenv("LLM_TEMPERATURE", "0.3"))
    llm_timeout: float = float(os.getenv("LLM_TIMEOUT", "60"))

    # 网关重试策略
    llm_max_retries: int = int(os.getenv("LLM_MAX_RETRIES", "3"))
    llm_retry_delay: float = float(os.getenv("LLM_RETRY_DELAY", "1.0"))

    # 录音 / 上传限制
    max_audio_seconds: float = float(os.getenv("MAX_AUDIO_SECONDS", "30"))
    contact_email: str = os.getenv("CONTACT_EMAIL", "tian.shao@namelos.xyz")

    # 客户端访问的网关地址
    server_url: str = os.getenv("SPEAKRIGHT_SERVER", "http://127.0.0.1:8900")

    def require_credentials(self) -> None:
        """缺少 LLM 凭证时直接失败"""
        if not self.llm_api_key.strip():
            raise ValueError("LLM_API_KEY 未配置，请在 .env 中设置")


settings = Settings()
