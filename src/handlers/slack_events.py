import logging

from slack_bolt import App

from src.models.turn import ASSISTANT, USER, Turn, said_at_now, turn_id
from src.services.completion_service import CompletionError, CompletionGateway
from src.services.window_service import WindowManager
from src.stores.messages import MessageStore
from src.utils.slack_text import strip_mentions

log = logging.getLogger(__name__)

ERROR_TEMPLATE = (
    "[System] An unexpected error occurred. The conversation may have exceeded the token limit, "
    "so try starting a new thread. client_msg_id={client_msg_id}"
)

# Slack resends an event when the first delivery wasn't acked within 3 seconds
TIMEOUT_RETRY_REASON = "http_timeout"


def _header(headers: dict, name: str) -> str | None:
    # Bolt lowercases header names and stores each value as a list
    value = headers.get(name)
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def is_timeout_retry(headers: dict | None) -> bool:
    if not headers:
        return False
    return _header(headers, "x-slack-retry-num") is not None and _header(headers, "x-slack-retry-reason") == TIMEOUT_RETRY_REASON


def thread_ts_of(event: dict) -> str:
    """Root ts of the thread, or the message's own ts when it starts one."""
    return event.get("thread_ts") or event["ts"]


def message_id_of(event: dict) -> str:
    # Bot and app-authored messages carry no client_msg_id
    return event.get("client_msg_id") or event.get("ts", "")


class MentionHandler:
    """Answers one app_mention: store the user turn, trim the thread, ask the LLM, store and post the reply."""

    def __init__(self, store: MessageStore, window_manager: WindowManager, gateway: CompletionGateway, persona: str) -> None:
        self.store = store
        self.window_manager = window_manager
        self.gateway = gateway
        self.persona = persona

    def handle(self, event: dict, say, headers: dict | None = None) -> None:
        message_id = message_id_of(event)
        if is_timeout_retry(headers):
            log.info("Ignoring timeout resend of %s", message_id)
            return

        stage = "received"
        channel = event.get("channel")
        thread_ts = event.get("thread_ts") or event.get("ts")
        try:
            thread_ts = thread_ts_of(event)
            user = event.get("user", "")

            self.store.append(self._turn(message_id, USER, user, thread_ts, event.get("text")))
            stage = "user-turn-persisted"

            window = self.window_manager.apply(thread_ts)
            if window.failed_evictions:
                log.warning("Thread %s: %d old turns left in store: %s", thread_ts, len(window.failed_evictions), ", ".join(window.failed_evictions))
            stage = "window-computed"

            completion = self.gateway.complete(self.persona, window.turns)
            stage = "completion-obtained"

            reply = self._turn(message_id, ASSISTANT, user, thread_ts, completion)
            if not reply.content:
                raise CompletionError("Completion was only mention markup")
            self.store.append(reply)
            stage = "assistant-turn-persisted"

            say(channel=channel, text=reply.content, thread_ts=thread_ts)
            stage = "replied"
            log.info("Replied in %s thread %s with %d turns of context", channel, thread_ts, len(window.turns))
        except Exception:
            log.exception("Mention %s failed after stage %s", message_id, stage)
            say(channel=channel, text=ERROR_TEMPLATE.format(client_msg_id=message_id), thread_ts=thread_ts)

    @staticmethod
    def _turn(message_id: str, role: str, user: str, thread_ts: str, text: str | None) -> Turn:
        return Turn(
            id=turn_id(message_id, role, user),
            thread_ts=thread_ts,
            content=strip_mentions(text),
            said_at=said_at_now(),
            role=role,
        )


def register_handlers(app: App, mention_handler: MentionHandler) -> None:
    def handle_app_mention(event: dict, say, request) -> None:
        mention_handler.handle(event, say, request.headers)

    app.event("app_mention")(handle_app_mention)
