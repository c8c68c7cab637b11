# jewelry_api/core/recaptcha.py
"""
Human verification for public order creation (reCAPTCHA v3 siteverify).

Fail-closed rules:
  - verification disabled only by RECAPTCHA_ENABLED=false (config, per request)
  - enabled but no RECAPTCHA_SECRET_KEY -> 503, never a silent skip
  - timeout / network error / success=false / low score -> rejection
"""
import logging

import httpx
from fastapi import Depends

from jewelry_api.core.config import Settings, get_settings
from jewelry_api.core.errors import BadRequestError, ServiceUnavailableError

logger = logging.getLogger(__name__)


class RecaptchaVerifier:
    def __init__(
        self,
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
    ):
        self.settings = settings
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return self.settings.RECAPTCHA_ENABLED

    def verify(self, token: str | None, remote_ip: str | None = None) -> float | None:
        """
        Verify a client token.

        Returns:
            The score reported by the service, or None when verification
            is disabled by configuration.

        Raises:
            BadRequestError(400): missing token or failed verification.
            ServiceUnavailableError(503): secret key not configured.
        """
        if not self.enabled:
            logger.debug("reCAPTCHA verification disabled by configuration")
            return None

        if not token:
            raise BadRequestError("reCAPTCHA token is required")

        secret = self.settings.RECAPTCHA_SECRET_KEY
        if not secret:
            logger.error("RECAPTCHA_SECRET_KEY is not set while RECAPTCHA_ENABLED=true")
            raise ServiceUnavailableError("CAPTCHA verification")

        form = {"secret": secret, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            with httpx.Client(
                timeout=self.settings.RECAPTCHA_TIMEOUT_SECONDS,
                transport=self.transport,
            ) as client:
                resp = client.post(self.settings.RECAPTCHA_VERIFY_URL, data=form)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("reCAPTCHA verification error: %s", exc)
            raise BadRequestError("CAPTCHA verification error")

        score = data.get("score")
        if not data.get("success") or score is None or score < self.settings.RECAPTCHA_MIN_SCORE:
            logger.warning(
                "reCAPTCHA verification failed: success=%s score=%s errors=%s",
                data.get("success"),
                score,
                data.get("error-codes"),
            )
            raise BadRequestError("CAPTCHA verification failed")

        return float(score)


def get_recaptcha_verifier(
    settings: Settings = Depends(get_settings),
) -> RecaptchaVerifier:
    """FastAPI dependency; settings are read on every request."""
    return RecaptchaVerifier(settings)
