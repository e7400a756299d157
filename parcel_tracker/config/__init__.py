"""Configuration package.

Note: Do not import and construct settings at package import time so that
importing the store never requires a configured environment. Import from
``parcel_tracker.config.settings`` directly where needed.
"""

__all__: list[str] = []
