"""
Web push fan-out to stored subscriptions.
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Optional

from pywebpush import webpush, WebPushException

from ..config import settings
from ..core.exceptions import ServiceUnavailable
from .interfaces import PushSubscriptionStore

logger = logging.getLogger(__name__)

# Push services answer these for subscriptions that no longer exist
GONE_STATUS_CODES = (404, 410)


@dataclass
class PushSendResult:
    sent: int = 0
    failed: int = 0
    removed: int = 0


class PushNotificationService:
    """Send a notification to every subscription of a user, or to all subscriptions."""

    def __init__(
        self,
        store: PushSubscriptionStore,
        send_push: Callable[..., Any] = webpush,
        vapid_private_key: Optional[str] = None,
        vapid_claim_email: Optional[str] = None,
    ):
        self.store = store
        self.send_push = send_push
        self.vapid_private_key = vapid_private_key if vapid_private_key is not None else settings.VAPID_PRIVATE_KEY
        self.vapid_claim_email = vapid_claim_email if vapid_claim_email is not None else settings.VAPID_CLAIM_EMAIL

    @property
    def configured(self) -> bool:
        return bool(self.vapid_private_key and self.vapid_claim_email)

    async def send(
        self,
        user_id: Optional[str],
        title: str,
        message: str,
        url: str,
    ) -> PushSendResult:
        """
        Deliver one payload to the matching subscriptions.

        Subscriptions the push service reports as gone are deleted. Raises
        ServiceUnavailable when VAPID keys are not configured and
        StorageError when the subscriptions cannot be read.
        """
        if not self.configured:
            raise ServiceUnavailable("Push notifications are not configured")

        subscriptions = await self.store.list_subscriptions(user_id)
        payload = json.dumps({"title": title, "body": message, "url": url})
        result = PushSendResult()
        loop = asyncio.get_running_loop()

        for sub in subscriptions:
            subscription_info: Dict[str, Any] = {"endpoint": sub.endpoint, "keys": sub.keys or {}}
            try:
                # pywebpush is blocking
                await loop.run_in_executor(
                    None,
                    partial(
                        self.send_push,
                        subscription_info=subscription_info,
                        data=payload,
                        vapid_private_key=self.vapid_private_key,
                        vapid_claims={"sub": f"mailto:{self.vapid_claim_email}"},
                    ),
                )
                result.sent += 1
            except WebPushException as ex:
                result.failed += 1
                status_code = ex.response.status_code if ex.response is not None else None
                logger.warning("WebPush failed for %s (%s): %s", sub.endpoint, status_code, ex)
                if status_code in GONE_STATUS_CODES:
                    await self.store.delete_by_endpoint(sub.endpoint)
                    result.removed += 1
            except ValueError as ex:
                # Undecodable p256dh/auth keys
                result.failed += 1
                logger.warning("Malformed keys for push subscription %s: %s", sub.endpoint, ex)

        logger.info(
            "Push fan-out for %s: %d sent, %d failed, %d removed",
            user_id or "all users", result.sent, result.failed, result.removed,
        )
        return result
