"""
SpeakRight - 发音练习后端
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def create_app(config=None, service=None) -> FastAPI:
    """
    创建 FastAPI 应用

    :param config: Settings，默认使用全局 settings
    :param service: AnalysisService，测试时可注入
    """
    from speakright.config import settings
    from speakright.routers import analyze
    from speakright.services.analysis_service import AnalysisService

    config = config or settings
    config.require_credentials()

    app = FastAPI(
        title="SpeakRight",
        description="发音练习 API — 输入目标句与识别文本，输出 IPA、单词评价与改进建议",
        version="0.1.0",
    )
    app.state.analysis_service = service or AnalysisService(config=config)
    app.include_router(analyze.router, prefix="/api")

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ())[1:]) or 'body'}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        logger.warning(f"[API] 请求参数无效: {details}")
        return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})

    return app
