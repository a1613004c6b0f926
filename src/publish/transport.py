"""
Message transports for subject reports.

A transport accepts a text payload for a topic and reports whether delivery
succeeded. Retry and acknowledgement policy belongs to the transport; callers
never retry.
"""

from __future__ import annotations

import logging
import threading

import paho.mqtt.client as mqtt

from models.config import PublishConfig


class Transport:
    """Transport interface."""

    def connect(self) -> None:
        """Open the connection (no-op by default)."""

    def publish(self, topic: str, payload: str) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        """Release the connection (no-op by default)."""


class LogTransport(Transport):
    """Writes reports to the log instead of a broker. Keeps no history."""

    def publish(self, topic: str, payload: str) -> bool:
        logging.info(f"[REPORT] topic={topic}\n{payload}")
        return True


class MqttTransport(Transport):
    """
    MQTT transport backed by paho-mqtt.

    The network loop runs on paho's own thread and reconnects on its own.
    publish() blocks the calling worker until the broker acknowledges the
    message or `publish_timeout` elapses.

    Example:
        transport = MqttTransport(PublishConfig(host="broker.local"))
        transport.connect()
        transport.publish("presence-monitor/subjects", "1: Person 1 - 12.00%")
    """

    def __init__(self, config: PublishConfig):
        self.config = config
        self._connected = threading.Event()
        self._client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=config.client_id,
        )
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect

    @property
    def is_connected(self) -> bool:
        return self._connected.is_set()

    def connect(self) -> None:
        """Start connecting in the background; an unreachable broker is not fatal."""
        logging.info(f"Connecting to MQTT broker {self.config.host}:{self.config.port}")
        self._client.connect_async(
            self.config.host,
            self.config.port,
            keepalive=self.config.keepalive,
        )
        self._client.loop_start()

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        if reason_code.is_failure:
            logging.error(f"MQTT connection refused: {reason_code}")
            return
        self._connected.set()
        logging.info(f"MQTT connected to {self.config.host}:{self.config.port}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        self._connected.clear()
        logging.warning(f"MQTT disconnected: {reason_code}")

    def publish(self, topic: str, payload: str) -> bool:
        try:
            info = self._client.publish(topic, payload, qos=self.config.qos)
            if info.rc != mqtt.MQTT_ERR_SUCCESS:
                logging.warning(f"MQTT publish to {topic} rejected: {mqtt.error_string(info.rc)}")
                return False
            info.wait_for_publish(timeout=self.config.publish_timeout)
            if not info.is_published():
                logging.warning(
                    f"MQTT publish to {topic} not acknowledged within {self.config.publish_timeout}s"
                )
                return False
            return True
        except (RuntimeError, ValueError) as e:
            logging.warning(f"MQTT publish to {topic} failed: {e}")
            return False

    def close(self) -> None:
        try:
            self._client.disconnect()
        finally:
            self._client.loop_stop()
            self._connected.clear()
        logging.info("MQTT transport closed")


def create_transport(config: PublishConfig) -> Transport:
    """MQTT when publishing is enabled, otherwise log-only."""
    if config.enabled:
        return MqttTransport(config)
    logging.info("Publishing disabled, reports will be logged only")
    return LogTransport()
