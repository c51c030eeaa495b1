"""
Message Processing Endpoint

Channel transports post each (user_message, ai_response) exchange here.
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from lead_signals.api.models import MessagePayload
from lead_signals.core.pipeline import SignalPipeline

router = APIRouter(prefix="/v1", tags=["Messages"])


@router.post("/messages")
async def process_message(payload: MessagePayload, request: Request):
    """
    Run signal extraction, scoring, event recording and alerting for one exchange.

    Persistence and alert delivery failures are reported inside the result
    (record.failures, alert.status == "failed"); they do not fail the request.

    Returns:
        ProcessResult as JSON
    """
    pipeline: SignalPipeline = request.app.state.pipeline

    try:
        result = await pipeline.process_message(
            tenant_id=payload.tenant_id,
            channel=payload.channel,
            user_message=payload.user_message,
            ai_response=payload.ai_response,
            lead_contact=payload.lead_contact
        )
        return result.model_dump(mode="json", by_alias=True)

    except Exception as e:
        logger.opt(exception=e).bind(tenant_id=payload.tenant_id, channel=payload.channel.value).error(
            f"Failed to process message for {payload.tenant_id}: {e}"
        )
        return JSONResponse(
            status_code=500,
            content={"status": "error", "error": str(e)}
        )
