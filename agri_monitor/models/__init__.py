# Database models
from agri_monitor.models.alert import Alert
from agri_monitor.models.community import Community
from agri_monitor.models.device_api_key import DeviceApiKey
from agri_monitor.models.profile import Profile
from agri_monitor.models.sensor_data import SensorData

__all__ = ["Alert", "Community", "DeviceApiKey", "Profile", "SensorData"]
