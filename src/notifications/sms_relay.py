"""
SMS Relay
Forwards customer notifications to a third-party SMS gateway.

Supported providers:
  - payamak-vip: JSON POST to the RestWebApi SendBatchSms endpoint
  - niazpardaz:  GET with query parameters, plain-text response
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests

import config
from utils.logger import get_logger

PROVIDER_PAYAMAK_VIP = "payamak-vip"
PROVIDER_NIAZPARDAZ = "niazpardaz"
PROVIDERS = (PROVIDER_PAYAMAK_VIP, PROVIDER_NIAZPARDAZ)


class SmsValidationError(ValueError):
    """Raised when a request is missing credentials, numbers or text."""


@dataclass
class SmsRequest:
    user_name: str = ""
    password: str = ""
    from_number: str = ""
    to_numbers: str = ""
    message_content: str = ""
    api_type: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SmsRequest":
        """Build from the wire payload (camelCase keys)."""
        return cls(
            user_name=data.get("userName") or "",
            password=data.get("password") or "",
            from_number=data.get("fromNumber") or "",
            to_numbers=data.get("toNumbers") or "",
            message_content=data.get("messageContent") or "",
            api_type=data.get("apiType") or "",
        )

    def validate(self) -> None:
        if not all(
            (self.user_name, self.password, self.from_number,
             self.to_numbers, self.message_content)
        ):
            raise SmsValidationError("Missing required fields")


@dataclass
class SmsResult:
    success: bool = False
    provider: str = ""
    response: Any = None
    error: str = ""
    status_code: int = 200

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "response": self.response}
        return {"error": self.error}


class SmsRelay:
    """HTTP client for the supported SMS gateways."""

    def __init__(
        self,
        timeout: Optional[int] = None,
        default_provider: Optional[str] = None,
        payamak_base_url: Optional[str] = None,
        niazpardaz_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout or config.SMS_TIMEOUT_SECONDS
        self.default_provider = default_provider or config.SMS_DEFAULT_PROVIDER
        self.payamak_base_url = payamak_base_url or config.PAYAMAK_VIP_BASE_URL
        self.niazpardaz_url = niazpardaz_url or config.NIAZPARDAZ_URL
        self.session = session or requests.Session()
        self.logger = get_logger()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def send(self, request: SmsRequest) -> SmsResult:
        """Send one SMS batch.

        Raises:
            SmsValidationError: required fields are missing.
        """
        request.validate()
        provider = request.api_type or self.default_provider

        try:
            if provider == PROVIDER_NIAZPARDAZ:
                result = self._send_niazpardaz(request)
            else:
                provider = PROVIDER_PAYAMAK_VIP
                result = self._send_payamak_vip(request)
        except requests.RequestException as exc:
            result = self._transport_failure(exc)

        result.provider = provider
        self.logger.log_sms_call(provider, request.to_numbers, result.success)
        if not result.success:
            self.logger.error(f"{provider} rejected SMS: {result.error}", component="SMS")
        return result

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    def _send_payamak_vip(self, request: SmsRequest) -> SmsResult:
        payload = {
            "userName": request.user_name,
            "password": request.password,
            "fromNumber": request.from_number,
            "toNumbers": request.to_numbers,
            "messageContent": request.message_content,
            "isFlash": False,
            "sendDelay": 0,
        }
        response = self.session.post(
            self.payamak_base_url + "SendBatchSms",
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json()

        # Result 0 means accepted; any other code is a gateway error
        if isinstance(body, dict) and body.get("Result") is not None:
            if body["Result"] == 0:
                return SmsResult(success=True, response=body)
            message = body.get("ErrorMessage") or f"API Error Code: {body['Result']}"
            return SmsResult(success=False, response=body, error=message, status_code=400)

        return SmsResult(success=True, response=body)

    def _send_niazpardaz(self, request: SmsRequest) -> SmsResult:
        params = {
            "username": request.user_name,
            "password": request.password,
            "from": request.from_number,
            "to": request.to_numbers,
            "text": request.message_content,
        }
        response = self.session.get(
            self.niazpardaz_url,
            params=params,
            headers={"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        text = response.text or ""

        lowered = text.lower()
        if text and "error" not in lowered and "خطا" not in text:
            return SmsResult(success=True, response=text)
        return SmsResult(
            success=False, response=text, error=text or "Failed to send SMS", status_code=400
        )

    @staticmethod
    def _transport_failure(exc: requests.RequestException) -> SmsResult:
        message = str(exc) or "Failed to send SMS"
        response = getattr(exc, "response", None)
        if response is not None:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                message = body["message"]
        return SmsResult(success=False, error=message, status_code=500)


def mask_payload(data: Mapping[str, Any]) -> str:
    """Render a request payload for logs with the credentials hidden."""
    safe = {k: ("***" if k in ("userName", "password") else v) for k, v in data.items()}
    return json.dumps(safe, ensure_ascii=False)
