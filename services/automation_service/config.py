# config.py - Service configuration for automation_service
# This file contains configuration settings for the automation_service.

from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Redis Configuration
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 3  # Separate DB from other services sharing the instance
    redis_password: Optional[str] = None

    # Service Configuration
    service_name: str = "automation-service"
    service_port: int = 8005
    log_level: str = "INFO"

    # Analytics Sink
    analytics_sink_url: str = "http://localhost:8003"
    analytics_enabled: bool = True
    analytics_timeout: float = 5.0  # seconds

    # Capability Providers
    webhook_timeout: float = 30.0  # seconds

    # Execution History
    default_execution_limit: int = 50
    monitor_recent_executions: int = 10
    execution_retention_days: int = 0  # 0 keeps executions forever

    class Config:
        env_prefix = "AUTOMATION_SERVICE_"
        env_file = ".env"

settings = Settings()
