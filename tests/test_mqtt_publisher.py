"""
Tests for pushing readings over MQTT.
"""

import json
from unittest.mock import MagicMock, patch

from agri_monitor.mqtt.publisher import publish_sensor_data, sensor_data_topic


class TestPublishSensorData:
    """Tests for publish_sensor_data function."""

    @patch("agri_monitor.mqtt.publisher.get_mqtt_client")
    def test_publish_with_global_client(self, mock_get_client, mock_mqtt_client):
        mock_get_client.return_value = mock_mqtt_client

        result = publish_sensor_data("community-a", {"reading": {"id": "r-1", "temperature": 46.0}})

        assert result is True
        mock_mqtt_client.publish.assert_called_once()
        call_args = mock_mqtt_client.publish.call_args

        # Check topic
        assert call_args[0][0] == "communities/community-a/sensor_data"

        # Check payload
        payload = json.loads(call_args[0][1])
        assert payload["reading"]["id"] == "r-1"
        assert call_args[1]["qos"] == 1

    @patch("agri_monitor.mqtt.publisher.get_mqtt_client")
    def test_publish_failure_code(self, mock_get_client, mock_mqtt_client):
        mock_mqtt_client.publish.return_value.rc = 4  # MQTT_ERR_NO_CONN
        mock_get_client.return_value = mock_mqtt_client

        assert publish_sensor_data("community-a", {}) is False

    @patch("agri_monitor.mqtt.publisher.get_mqtt_client")
    def test_publish_fails_when_broker_unreachable(self, mock_get_client):
        """Returns False when neither a global nor a temporary connection works."""
        mock_get_client.return_value = None

        with patch("agri_monitor.mqtt.publisher.mqtt") as mock_mqtt, \
                patch("agri_monitor.mqtt.publisher.time.sleep"):
            mock_temp_client = MagicMock()
            mock_temp_client.is_connected.return_value = False
            mock_mqtt.Client.return_value = mock_temp_client

            result = publish_sensor_data("community-a", {"reading": {}})

            assert result is False
            mock_temp_client.publish.assert_not_called()
            mock_temp_client.loop_stop.assert_called_once()

    @patch("agri_monitor.mqtt.publisher.get_mqtt_client")
    def test_connection_error_is_swallowed(self, mock_get_client):
        mock_get_client.return_value = None

        with patch("agri_monitor.mqtt.publisher.mqtt") as mock_mqtt:
            mock_mqtt.Client.return_value.connect.side_effect = OSError("Name or service not known")

            assert publish_sensor_data("community-a", {}) is False

    @patch("agri_monitor.mqtt.publisher.get_mqtt_client")
    def test_global_client_publish_error(self, mock_get_client, mock_mqtt_client):
        """paho raises ValueError for invalid topics or oversized payloads."""
        mock_mqtt_client.publish.side_effect = ValueError("Invalid topic.")
        mock_get_client.return_value = mock_mqtt_client

        assert publish_sensor_data("community/+", {}) is False

    @patch("agri_monitor.mqtt.publisher.get_mqtt_client")
    def test_temp_client_closed_when_publish_raises(self, mock_get_client):
        mock_get_client.return_value = None

        with patch("agri_monitor.mqtt.publisher.mqtt") as mock_mqtt:
            mock_temp_client = MagicMock()
            mock_temp_client.is_connected.return_value = True
            mock_temp_client.publish.return_value.wait_for_publish.side_effect = RuntimeError("publish timed out")
            mock_mqtt.Client.return_value = mock_temp_client

            result = publish_sensor_data("community-a", {"reading": {}})

            assert result is False
            mock_temp_client.loop_stop.assert_called_once()
            mock_temp_client.disconnect.assert_called_once()

    @patch("agri_monitor.mqtt.publisher.get_mqtt_client")
    def test_datetimes_are_serialized(self, mock_get_client, mock_mqtt_client):

        from datetime import datetime

        mock_get_client.return_value = mock_mqtt_client

        publish_sensor_data("community-a", {"at": datetime(2025, 3, 1, 6, 30)})

        payload = json.loads(mock_mqtt_client.publish.call_args[0][1])
        assert payload["at"] == "2025-03-01 06:30:00"


def test_topic_per_community():
    assert sensor_data_topic("abc") == "communities/abc/sensor_data"
