from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from auth_api.core.config import Settings
from auth_api.core.deps import get_settings
from auth_api.core.responses import api_response
from auth_api.services.payments import SIGNATURE_HEADER, relay_event

router = APIRouter()


@router.post("/webhook")
async def payment_webhook(request: Request, app_settings: Settings = Depends(get_settings)):
    """Payment provider events. Reads the raw body so the signature is checked over the exact bytes."""
    payload = await request.body()
    result = await run_in_threadpool(
        relay_event, payload, request.headers.get(SIGNATURE_HEADER), app_settings
    )
    return api_response("Webhook received", result)
