"""
SMS relay route - forwards a message to the configured SMS gateway.
"""
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

import config
from api.dependencies import error_response
from notifications.sms_relay import SmsRelay, SmsRequest, SmsValidationError, mask_payload
from utils.logger import get_logger

router = APIRouter()

# Created on first use so tests can swap in a relay with a mocked session
_relay = None


def get_relay() -> SmsRelay:
    global _relay
    if _relay is None:
        _relay = SmsRelay()
    return _relay


@router.post("/send-sms", summary="Send an SMS through the gateway")
async def send_sms(request: Request):
    """
    Body: ``userName``, ``password``, ``fromNumber``, ``toNumbers``,
    ``messageContent`` and optional ``apiType`` (payamak-vip or niazpardaz).

    Returns ``{"success": true, "response": ...}`` or ``{"error": ...}``.
    """
    if not config.FEATURE_SMS_ENABLED:
        return error_response("SMS relay is disabled", status.HTTP_403_FORBIDDEN)

    try:
        data = await request.json()
    except ValueError:
        return error_response("Invalid JSON")
    if not isinstance(data, dict):
        return error_response("Invalid data format")

    get_logger().debug(f"SMS request: {mask_payload(data)}", component="SMS")
    try:
        result = get_relay().send(SmsRequest.from_dict(data))
    except SmsValidationError as e:
        return error_response(str(e))

    return JSONResponse(status_code=result.status_code, content=result.to_dict())
