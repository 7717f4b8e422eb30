import logging

from dotenv import load_dotenv
from slack_bolt import App
from slack_bolt.adapter.aws_lambda import SlackRequestHandler
from slack_bolt.adapter.socket_mode import SocketModeHandler

from src.app.config import AppConfig, load_config
from src.handlers.slack_events import MentionHandler, register_handlers
from src.services.completion_service import CompletionGateway
from src.services.window_service import WindowManager
from src.stores.messages import MessageStore

log = logging.getLogger(__name__)

# Built once per Lambda container so warm invocations reuse the clients
_lambda_handler: SlackRequestHandler | None = None


def main() -> None:
    load_dotenv()
    config = load_config()
    configure_logging(config)
    if not config.slack_app_token:
        raise RuntimeError("SLACK_APP_TOKEN is required to run in Socket Mode")
    app = create_app(config)
    register_handlers(app, build_mention_handler(config))
    log.info("Starting Socket Mode; history in %s (%s), window of %d turns", config.messages_table_name, config.aws_region, config.window_size)
    # Blocks forever; Socket Mode holds a persistent outbound WebSocket
    start_socket_mode(app, config)


def lambda_handler(event, context):
    global _lambda_handler
    if _lambda_handler is None:
        config = load_config()
        configure_logging(config)
        # Lambda freezes the container once the response is returned, so ack only after the listener finishes
        app = create_app(config, process_before_response=True)
        register_handlers(app, build_mention_handler(config))
        _lambda_handler = SlackRequestHandler(app=app)
    return _lambda_handler.handle(event, context)


def configure_logging(config: AppConfig) -> None:
    logging.basicConfig(level=config.log_level, format="%(name)s | %(message)s")
    # Lambda pre-installs a root handler, which makes basicConfig a no-op there
    logging.getLogger().setLevel(config.log_level)


def build_mention_handler(config: AppConfig) -> MentionHandler:
    store = MessageStore.from_config(config)
    return MentionHandler(
        store=store,
        window_manager=WindowManager(store, config.window_size),
        gateway=CompletionGateway.from_config(config),
        persona=config.persona,
    )


def create_app(config: AppConfig, process_before_response: bool = False) -> App:
    # SLACK_BOT_TOKEN (xoxb-...) authenticates API calls; the signing secret verifies inbound requests
    return App(
        token=config.slack_bot_token,
        signing_secret=config.slack_signing_secret,
        process_before_response=process_before_response,
    )


def start_socket_mode(app: App, config: AppConfig) -> None:
    # SLACK_APP_TOKEN (xapp-...) opens the WebSocket connection, so no public URL is needed
    handler = SocketModeHandler(app, config.slack_app_token)
    handler.start()


if __name__ == "__main__":
    main()
