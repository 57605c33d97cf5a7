from __future__ import annotations
import os


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    JSON_SORT_KEYS = False
    DASHBOARD_TIMEZONE = os.getenv("DASHBOARD_TIMEZONE", "Europe/Berlin")
    SEED_SAMPLE_DATA = True
    UPCOMING_DEADLINES_LIMIT = 5
    # live feed
    NOTIFICATION_CAPACITY = 10
    NOTIFICATION_TICK_SECONDS = 30.0
    NOTIFICATION_PROBABILITY = 0.3
    NOTIFICATION_SIMULATION = True


class DevConfig(BaseConfig):
    DEBUG = True


class TestConfig(BaseConfig):
    TESTING = True
    # arrivals are driven by hand in tests
    NOTIFICATION_SIMULATION = False


class ProdConfig(BaseConfig):
    DEBUG = False
    NOTIFICATION_TICK_SECONDS = 60.0


config_map = {
    "dev": DevConfig,
    "test": TestConfig,
    "prod": ProdConfig,
    "default": DevConfig,
}
