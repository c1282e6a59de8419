"""Service for delivering sign-in codes by SMS through the Twilio REST API."""

import logging
from typing import Optional

import httpx

from app.domain.models.user import User

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


class SmsService:
    """Sends two-factor codes as text messages."""

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        to_number: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
        dev_mode: bool = False,
    ):
        self.account_sid = account_sid or ""
        self.auth_token = auth_token or ""
        self.from_number = from_number or ""
        # Every message goes to this number when set; accounts carry no phone.
        self.to_number = to_number or ""
        self.timeout = timeout
        self._client = client
        self.enabled = bool(self.account_sid and self.auth_token and self.from_number and self.to_number)
        self.dev_mode = dev_mode

    def send_two_factor_code(self, code: str, user: User) -> bool:
        """
        Send the sign-in code for ``user``.

        Returns:
            True if Twilio accepted the message, False otherwise
        """
        if not self.enabled:
            if self.dev_mode:
                logger.warning("SMS disabled; sign-in code for account %s is %s", user.id, code)
                return True
            logger.error("Twilio is not configured; cannot send sign-in code to account %s", user.id)
            return False

        url = f"{TWILIO_API_BASE}/Accounts/{self.account_sid}/Messages.json"
        data = {
            "Body": f"Tu código de verificación es: {code}",
            "From": self.from_number,
            "To": self.to_number,
        }
        try:
            if self._client is not None:
                response = self._client.post(url, data=data, auth=(self.account_sid, self.auth_token))
            else:
                response = httpx.post(
                    url,
                    data=data,
                    auth=(self.account_sid, self.auth_token),
                    timeout=self.timeout,
                )
            response.raise_for_status()
        except httpx.HTTPError:
            logger.exception("Failed to send sign-in code to account %s", user.id)
            return False

        logger.info("Sign-in code sent for account %s", user.id)
        return True
