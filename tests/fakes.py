# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field

from pecal.reminders.push import PushMessage, PushResult


@dataclass
class FakePushGateway:
    """
    Recording push gateway.

    Tokens listed in `bounce` are reported back as bounced, like FCM does for
    unregistered registration tokens.
    """

    bounce: set[str] = field(default_factory=set)
    sent: list[PushMessage] = field(default_factory=list)

    def send(self, messages: list[PushMessage]) -> PushResult:
        result = PushResult()
        for message in messages:
            if message.token in self.bounce:
                result.failed += 1
                result.bounced_tokens.append(message.token)
                continue
            self.sent.append(message)
            result.sent += 1
        return result


@dataclass
class BrokenPushGateway:
    """Push gateway whose transport blows up with a non-Firebase error."""

    calls: int = 0

    def send(self, messages: list[PushMessage]) -> PushResult:
        self.calls += 1
        raise RuntimeError("push transport exploded")
