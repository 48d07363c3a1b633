import json
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Any, Optional
import pika
from .config import rabbitmq_config
from .setup import RabbitMQSetup

logger = logging.getLogger(__name__)


class RabbitMQProducer:
    """Handles publishing messages to RabbitMQ"""

    def __init__(self):
        self.connection: Optional[pika.BlockingConnection] = None
        self.channel = None
        self.setup = RabbitMQSetup()
        # BlockingConnection is not thread-safe; background tasks publish from worker threads
        self._lock = threading.Lock()

    def connect(self) -> None:
        """Establish connection to RabbitMQ"""
        try:
            self.connection = self.setup.create_connection()
            self.channel = self.connection.channel()
            self.setup.declare_exchanges(self.channel)
            logger.info("RabbitMQ producer connected successfully")
        except Exception as e:
            logger.error(f"Failed to connect RabbitMQ producer: {e}")
            raise

    def disconnect(self) -> None:
        """Close RabbitMQ connection"""
        if self.channel and not self.channel.is_closed:
            self.channel.close()
        if self.connection and not self.connection.is_closed:
            self.connection.close()
        logger.info("RabbitMQ producer disconnected")

    def _publish(self, exchange: str, routing_key: str, message_data: Dict[str, Any]) -> bool:
        with self._lock:
            try:
                if not self.connection or self.connection.is_closed:
                    self.connect()

                message_data = {**message_data, "timestamp": datetime.now(timezone.utc).isoformat()}
                self.channel.basic_publish(
                    exchange=exchange,
                    routing_key=routing_key,
                    body=json.dumps(message_data, default=str),
                    properties=pika.BasicProperties(
                        delivery_mode=2,  # Make message persistent
                        content_type='application/json',
                    )
                )
                return True

            except Exception as e:
                logger.error(f"Failed to publish message to {exchange}/{routing_key}: {e}")
                return False

    def publish_notification(self, notification: Dict[str, Any]) -> bool:
        """
        Publish a pre-formatted notification for the notification dispatcher

        Args:
            notification: {userId, email, type, title, body, data}

        Returns:
            bool: True if message published successfully, False otherwise
        """
        published = self._publish(
            rabbitmq_config.notification_exchange,
            rabbitmq_config.notification_dispatch_key,
            notification,
        )
        if published:
            logger.info(f"Published {notification.get('type')} notification for user {notification.get('userId')}")
        return published

    def publish_group_event(self, group_id: str, event: str, payload: Dict[str, Any]) -> bool:
        """
        Publish a realtime event on the group's channel (routing key group.<group_id>.<event>)

        Returns:
            bool: True if message published successfully, False otherwise
        """
        routing_key = f"{rabbitmq_config.realtime_key_prefix}.{group_id}.{event}"
        published = self._publish(
            rabbitmq_config.realtime_exchange,
            routing_key,
            {"event": event, "groupId": group_id, "payload": payload},
        )
        if published:
            logger.info(f"Published realtime event {event} for group {group_id}")
        return published


# Global producer instance
_rabbitmq_producer: Optional[RabbitMQProducer] = None


def get_rabbitmq_producer() -> RabbitMQProducer:
    """Get or create RabbitMQ producer instance (connects lazily on first publish)"""
    global _rabbitmq_producer
    if _rabbitmq_producer is None:
        _rabbitmq_producer = RabbitMQProducer()
    return _rabbitmq_producer


def close_rabbitmq_producer() -> None:
    """Close RabbitMQ producer connection"""
    global _rabbitmq_producer
    if _rabbitmq_producer:
        _rabbitmq_producer.disconnect()
        _rabbitmq_producer = None
