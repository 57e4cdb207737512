import logging
from typing import Optional

import requests

from tourist_helper.config import settings

logger = logging.getLogger(__name__)


class CaptchaVerifier:
    """Checks reCAPTCHA v2 tokens against Google's siteverify endpoint"""

    def __init__(
        self,
        secret_key: str,
        verify_url: str,
        enabled: bool = True,
        timeout: int = 10,
    ):
        self.secret_key = secret_key
        self.verify_url = verify_url
        self.enabled = enabled
        self.timeout = timeout

    def verify(self, token: Optional[str]) -> bool:
        if not self.enabled:
            return True
        if not token:
            return False

        try:
            resp = requests.post(
                self.verify_url,
                params={"secret": self.secret_key, "response": token},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("CAPTCHA verification error: %s", e)
            return False

        if data.get("success") is not True:
            logger.info("CAPTCHA rejected: %s", data.get("error-codes"))
            return False
        return True


def get_captcha_verifier() -> CaptchaVerifier:
    return CaptchaVerifier(
        secret_key=settings.RECAPTCHA_SECRET_KEY,
        verify_url=settings.RECAPTCHA_VERIFY_URL,
        enabled=settings.RECAPTCHA_ENABLED,
        timeout=settings.RECAPTCHA_TIMEOUT_SECONDS,
    )
