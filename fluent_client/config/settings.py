from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fluent_client.constants import (
    DEFAULT_ACCEPT,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_CULTURE,
    DEFAULT_USER_AGENT,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    base_url: str = Field("", validation_alias="FLUENT_CLIENT_BASE_URL")

    user_agent: str = Field(DEFAULT_USER_AGENT, validation_alias="FLUENT_CLIENT_USER_AGENT")
    accepted_content_type: str = Field(DEFAULT_ACCEPT, validation_alias="FLUENT_CLIENT_ACCEPT")
    culture: str = Field(DEFAULT_CULTURE, validation_alias="FLUENT_CLIENT_CULTURE")
    content_type: str = Field(DEFAULT_CONTENT_TYPE, validation_alias="FLUENT_CLIENT_CONTENT_TYPE")

    # Used when a chain never sets a path. None makes an unset path a configuration error.
    default_path: str | None = Field("", validation_alias="FLUENT_CLIENT_DEFAULT_PATH")

    # Per-request deadline applied by the dispatcher; None defers to the client-level timeout.
    request_timeout_seconds: float | None = Field(None, validation_alias="FLUENT_CLIENT_REQUEST_TIMEOUT_SECONDS")
    client_timeout_seconds: float = Field(100.0, validation_alias="FLUENT_CLIENT_CLIENT_TIMEOUT_SECONDS")
    follow_redirects: bool = Field(True, validation_alias="FLUENT_CLIENT_FOLLOW_REDIRECTS")
