"""
分析网关客户端 (httpx)
"""
import logging
from typing import Optional

import httpx

from speakright.config import settings
from speakright.models.analysis import AnalyzeRequest, AnalyzeResponse

logger = logging.getLogger(__name__)


class AnalysisRequestError(RuntimeError):
    """网关返回非 2xx 或无法连接"""

    def __init__(self, message: str, status_code: Optional[int] = None, details: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AnalysisClient:
    """POST /api/analyze 的异步客户端"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.server_url).rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def analyze(self, spoken_text: str, target_text: str = "") -> AnalyzeResponse:
        payload = AnalyzeRequest(spoken_text=spoken_text, target_text=target_text)
        logger.info(f"[Client] 请求分析: {self.base_url}/api/analyze")

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            try:
                response = await client.post(
                    "/api/analyze",
                    json=payload.model_dump(by_alias=True),
                )
            except httpx.HTTPError as e:
                raise AnalysisRequestError(f"Analysis failed: {e}") from e

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                details = str(body.get("details") or body.get("error") or "")
            else:
                details = response.text
            logger.error(f"[Client] 分析失败: status={response.status_code}, details={details}")
            raise AnalysisRequestError(
                f"Analysis failed: {details or response.status_code}",
                status_code=response.status_code,
                details=details,
            )

        return AnalyzeResponse.model_validate(response.json())
