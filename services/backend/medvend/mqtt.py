from __future__ import annotations

import json
import logging
import time

import paho.mqtt.client as mqtt

from .config import Settings
from .utils import now_ms

logger = logging.getLogger(__name__)


class MqttBus:
    """
    Doorbell for the controller: announces "queue X has N entries" so it can
    poll right away instead of waiting for its next tick.

    Commands themselves only ever travel over the HTTP queue endpoints.
    With MQTT_ENABLED=0 every publish is a no-op.
    """

    def __init__(self, settings: Settings, client: mqtt.Client | None = None) -> None:
        self._settings = settings
        self.enabled = settings.mqtt_enabled
        self.connected = False
        self._client = client
        if self.enabled and self._client is None:
            self._client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
        if self._client is not None:
            self._client.on_connect = self._on_connect
            self._client.on_disconnect = self._on_disconnect

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code == 0:
            self.connected = True
            logger.info("[MQTT] connected")
        else:
            logger.warning("[MQTT] connect failed rc=%s", reason_code)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self.connected = False
        logger.warning("[MQTT] disconnected rc=%s", reason_code)

    def start(self, retry_delay_s: float = 2.0) -> bool:
        if not self.enabled:
            logger.info("[MQTT] disabled")
            return False

        host, port = self._settings.mqtt_host, self._settings.mqtt_port
        for i in range(self._settings.mqtt_connect_retries):
            try:
                self._client.connect(host, port)
                self._client.loop_start()
                logger.info("[MQTT] loop started %s:%d", host, port)
                return True
            except OSError as e:
                logger.warning("[MQTT] retry %d: %s", i + 1, e)
                time.sleep(retry_delay_s)
        logger.error("[MQTT] failed to start, queue announcements off")
        return False

    def stop(self) -> None:
        if self._client is None:
            return
        self._client.loop_stop()
        self._client.disconnect()

    def topic(self, queue_name: str) -> str:
        return f"{self._settings.mqtt_topic_prefix}/evt/queue/{queue_name}"

    def publish(self, topic: str, payload: dict, qos: int = 1) -> None:
        if not self.enabled:
            return
        self._client.publish(topic, json.dumps(payload), qos=qos)

    def announce(self, queue_name: str, pending: int) -> None:
        """CommandQueues enqueue listener."""
        self.publish(self.topic(queue_name), {"queue": queue_name, "pending": pending, "ts": now_ms()})
