"""
Push gateway: delivers reminder pushes through Firebase Cloud Messaging.

Each message is sent to one registration token. Failures are isolated per
token; tokens FCM reports as unregistered are returned as bounced so the
caller can deactivate them.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from firebase_admin import messaging, credentials, initialize_app, _apps  # type: ignore
from firebase_admin import exceptions as firebase_exceptions  # type: ignore

from .config import reminder_settings
from .metrics import push_sent_total, push_failed_total

logger = logging.getLogger(__name__)

FCM_MAX_BATCH = 500


@dataclass
class PushMessage:
    token: str
    title: str
    body: str
    data: Dict[str, str] = field(default_factory=dict)


@dataclass
class PushResult:
    sent: int = 0
    failed: int = 0
    bounced_tokens: List[str] = field(default_factory=list)


def _chunk(items: List[PushMessage], size: int) -> List[List[PushMessage]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def _ensure_firebase_initialized() -> bool:
    if _apps:
        return True

    proj = reminder_settings.FCM_PROJECT_ID
    creds_json: Optional[str] = (
        reminder_settings.FCM_CREDENTIALS_JSON
        or os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON")
        or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    )
    if not creds_json or creds_json.strip() == "":
        logger.warning("⚠️ [FCM] No credentials provided - push notifications are disabled")
        return False

    options = {"projectId": proj} if proj else None
    try:
        if creds_json.strip().startswith("{"):
            initialize_app(credentials.Certificate(json.loads(creds_json)), options=options)
            logger.info("✅ [FCM] Firebase app initialized (inline JSON)")
        elif os.path.exists(creds_json):
            initialize_app(credentials.Certificate(creds_json), options=options)
            logger.info("✅ [FCM] Firebase app initialized (file)")
        else:
            initialize_app(options=options)
            logger.info("✅ [FCM] Firebase app initialized (default credentials)")
    except (ValueError, OSError) as e:
        logger.error(f"❌ [FCM] Failed to initialize Firebase: {e!r}")
        return False
    return True


def _is_bounce(exc: Optional[Exception]) -> bool:
    if isinstance(exc, messaging.UnregisteredError):
        return True
    return isinstance(exc, firebase_exceptions.InvalidArgumentError)


class FCMPushGateway:
    """Batch sender over firebase_admin.messaging.send_each."""

    def send(self, messages: List[PushMessage]) -> PushResult:
        result = PushResult()
        if not messages:
            return result
        if not reminder_settings.PUSH_ENABLED or not _ensure_firebase_initialized():
            result.failed = len(messages)
            push_failed_total.inc(len(messages))
            return result

        for batch in _chunk(messages, FCM_MAX_BATCH):
            fcm_messages = [
                messaging.Message(
                    token=m.token,
                    notification=messaging.Notification(title=m.title, body=m.body),
                    data=m.data,
                    apns=messaging.APNSConfig(
                        headers={"apns-push-type": "alert", "apns-priority": "10"},
                        payload=messaging.APNSPayload(aps=messaging.Aps(sound="default")),
                    ),
                    android=messaging.AndroidConfig(priority="high"),
                )
                for m in batch
            ]
            try:
                response = messaging.send_each(fcm_messages)
            except firebase_exceptions.FirebaseError as e:
                logger.error(f"❌ [FCM] Batch send failed for {len(batch)} messages: {e!r}")
                result.failed += len(batch)
                push_failed_total.inc(len(batch))
                continue

            for message, send_response in zip(batch, response.responses):
                if send_response.success:
                    result.sent += 1
                    continue
                result.failed += 1
                if _is_bounce(send_response.exception):
                    result.bounced_tokens.append(message.token)
                else:
                    logger.warning(f"⚠️ [FCM] Send failed for token {message.token[:20]}...: {send_response.exception!r}")
            push_sent_total.inc(response.success_count)
            push_failed_total.inc(response.failure_count)

        result.bounced_tokens = list(dict.fromkeys(result.bounced_tokens))
        return result
