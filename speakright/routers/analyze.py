"""
发音分析 API 路由

  POST /api/analyze   — 对比目标句与识别文本，返回 IPA、单词评价与建议
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from speakright.models.analysis import AnalyzeRequest, AnalyzeResponse, ErrorResponse
from speakright.services.analysis_service import (
    AnalysisFailedError,
    AnalysisService,
    TargetCompletionError,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["analyze"])


def get_analysis_service(request: Request) -> AnalysisService:
    """应用级单例 service，在 create_app 中挂载"""
    return request.app.state.analysis_service


def _error(status_code: int, error: str, details: str) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


# ==================== API Endpoints ====================


@router.post(
    "/analyze",
    summary="分析发音",
    response_model=AnalyzeResponse,
    responses={500: {"model": ErrorResponse}},
)
def analyze(req: AnalyzeRequest, service: AnalysisService = Depends(get_analysis_service)):
    """
    对比目标句与识别文本

    targetText 为空时由 LLM 根据识别文本补全，并在响应中返回
    """
    try:
        outcome = service.analyze(
            spoken_text=req.spoken_text,
            target_text=req.target_text if req.has_target() else None,
        )
    except AnalysisFailedError as e:
        logger.error(f"[API] 分析失败: {e}", exc_info=True)
        return _error(500, "Failed to get valid response after multiple attempts", str(e))
    except TargetCompletionError as e:
        logger.error(f"[API] 目标句补全失败: {e}", exc_info=True)
        return _error(500, "Failed to analyze pronunciation", str(e))
    except Exception as e:
        logger.error(f"[API] 未知错误: {e}", exc_info=True)
        return _error(500, "Failed to analyze pronunciation", str(e))

    return AnalyzeResponse(content=outcome.content, target_text=outcome.target_text)
