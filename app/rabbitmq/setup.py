import logging
import pika
from .config import rabbitmq_config

logger = logging.getLogger(__name__)


class RabbitMQSetup:
    """Creates connections and declares the exchanges this service publishes to"""

    def create_connection(self) -> pika.BlockingConnection:
        parameters = pika.URLParameters(rabbitmq_config.url)
        parameters.connection_attempts = rabbitmq_config.connection_attempts
        parameters.retry_delay = rabbitmq_config.retry_delay
        return pika.BlockingConnection(parameters)

    def declare_exchanges(self, channel) -> None:
        for exchange in (rabbitmq_config.notification_exchange, rabbitmq_config.realtime_exchange):
            channel.exchange_declare(exchange=exchange, exchange_type="topic", durable=True)
            logger.info(f"Declared exchange {exchange}")
