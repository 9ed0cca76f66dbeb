from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> list[str]:
    return [p.strip() for p in os.getenv(name, default).split(",") if p.strip()]


@dataclass(frozen=True)
class Settings:
    catalog_path: str = "./data/medicines.json"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    mqtt_enabled: bool = False
    mqtt_host: str = "mqtt"
    mqtt_port: int = 1883
    mqtt_topic_prefix: str = "medvend"
    mqtt_connect_retries: int = 10

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            catalog_path=os.getenv("CATALOG_PATH", "./data/medicines.json"),
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", "8000")),
            cors_origins=_env_list("CORS_ORIGINS", "*"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            mqtt_enabled=_env_bool("MQTT_ENABLED", "0"),
            mqtt_host=os.getenv("MQTT_HOST", "mqtt"),
            mqtt_port=int(os.getenv("MQTT_PORT", "1883")),
            mqtt_topic_prefix=os.getenv("MQTT_TOPIC_PREFIX", "medvend").strip("/"),
            mqtt_connect_retries=int(os.getenv("MQTT_CONNECT_RETRIES", "10")),
        )
