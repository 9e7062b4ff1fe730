"""
Agri Monitor - MQTT Publisher
Pushes newly ingested readings to dashboards subscribed per community
"""

import json
import logging
import time

import paho.mqtt.client as mqtt

from agri_monitor.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# Global reference to a long-lived MQTT client, if the process keeps one
_mqtt_client: mqtt.Client | None = None


def get_mqtt_client() -> mqtt.Client | None:
    """Get the global MQTT client instance."""
    return _mqtt_client


def start_mqtt_client(settings: Settings | None = None) -> mqtt.Client:
    """Open the long-lived client used by publish_sensor_data (non-blocking)."""
    global _mqtt_client
    settings = settings or default_settings
    client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
    client.connect_async(settings.mqtt_broker, settings.mqtt_port, 60)
    client.loop_start()
    _mqtt_client = client
    logger.info(f"📡 Connecting to MQTT broker {settings.mqtt_broker}:{settings.mqtt_port}")
    return client


def stop_mqtt_client() -> None:
    """Stop the long-lived client, if one was started."""
    global _mqtt_client
    if _mqtt_client is None:
        return
    _mqtt_client.loop_stop()
    _mqtt_client.disconnect()
    _mqtt_client = None
    logger.info("⏹️ MQTT client stopped")


def sensor_data_topic(community_id: str) -> str:
    return f"communities/{community_id}/sensor_data"


def publish_sensor_data(community_id: str, payload: dict, settings: Settings | None = None) -> bool:
    """
    Publish a reading to the community's dashboard topic.
    Creates a temporary MQTT connection if no global client is available.

    Args:
        community_id: Community the reading belongs to
        payload: JSON-serializable reading (and advisory alerts)
        settings: Broker settings, defaults to the process settings

    Returns:
        True if published successfully
    """
    settings = settings or default_settings
    topic = sensor_data_topic(community_id)

    try:
        message = json.dumps(payload, default=str)

        # Try global client first
        client = get_mqtt_client()
        if client and client.is_connected():
            result = client.publish(topic, message, qos=1)
            if result.rc == mqtt.MQTT_ERR_SUCCESS:
                logger.info(f"📤 Reading pushed to {topic}")
                return True
            logger.error(f"❌ Failed to push reading to {topic}: {result.rc}")
            return False

        # Create temporary connection
        temp_client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
        temp_client.connect(settings.mqtt_broker, settings.mqtt_port, keepalive=10)
        temp_client.loop_start()
        try:
            # Wait for connection (max 1 second)
            for _ in range(10):
                if temp_client.is_connected():
                    break
                time.sleep(0.1)

            if not temp_client.is_connected():
                logger.warning("⚠️ Could not connect to MQTT broker")
                return False

            result = temp_client.publish(topic, message, qos=1)
            result.wait_for_publish(timeout=5)
        finally:
            temp_client.loop_stop()
            temp_client.disconnect()

        if result.rc == mqtt.MQTT_ERR_SUCCESS:
            logger.info(f"📤 Reading pushed to {topic} (via temp connection)")
            return True
        logger.error(f"❌ Failed to push reading to {topic}: {result.rc}")
        return False

    except Exception as e:
        logger.error(f"❌ MQTT error pushing reading to {topic}: {e}")
        return False
