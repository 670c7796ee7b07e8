"""配置管理"""

from functools import lru_cache
from typing import Annotated
from urllib.parse import quote

from pydantic import BaseModel, Field, SecretStr, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# JWT 固定声明
TOKEN_ISSUER = "chirper"
ACCESS_TOKEN_AUDIENCE = "chirper-users"
REFRESH_TOKEN_AUDIENCE = "chirper-refresh"


class DatabaseConfig(BaseModel):
    """数据库配置"""

    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    name: str = "chirper"
    user: str = "postgres"
    password: SecretStr = SecretStr("postgres")

    # 完整连接串（优先于上面的分项配置）
    dsn: str | None = None

    # 连接池上限
    pool_size: int = Field(default=20, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: int = Field(default=30, ge=1)

    @computed_field
    @property
    def url(self) -> str:
        """构建数据库连接 URL"""
        if self.dsn:
            return self.dsn
        user = quote(self.user, safe="")
        password = quote(self.password.get_secret_value(), safe="")
        return f"postgresql+asyncpg://{user}:{password}@{self.host}:{self.port}/{self.name}"


class Settings(BaseSettings):
    """应用配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="_",
        env_nested_max_split=1,
        extra="ignore",
    )

    # 必填字段
    jwt_secret: SecretStr
    jwt_refresh_secret: SecretStr

    # 令牌有效期
    access_token_expire_minutes: int = Field(default=7 * 24 * 60, ge=1)
    refresh_token_expire_days: int = Field(default=30, ge=1)

    # 应用配置
    app_name: str = "Chirper API"
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False
    auto_create_schema: bool = False

    # 数据库（嵌套配置）
    db: DatabaseConfig = DatabaseConfig()

    # CORS（逗号分隔）
    cors_origins: Annotated[list[str], NoDecode] = []

    @computed_field
    @property
    def database_url(self) -> str:
        """数据库连接 URL（供 SQLAlchemy 使用）"""
        return self.db.url

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in allowed:
            msg = f"log_level must be one of {allowed}"
            raise ValueError(msg)
        return upper

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @model_validator(mode="after")
    def validate_distinct_secrets(self) -> "Settings":
        if self.jwt_secret.get_secret_value() == self.jwt_refresh_secret.get_secret_value():
            msg = "jwt_refresh_secret must differ from jwt_secret"
            raise ValueError(msg)
        return self


@lru_cache
def get_settings() -> Settings:
    """全局单例"""
    return Settings()
