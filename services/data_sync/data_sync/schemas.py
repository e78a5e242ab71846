from pydantic import BaseModel, ConfigDict


CONFIG_JSON_SCHEMA = {
  "type": "object",
  "required": ["user", "password", "location", "queues"],
  "properties": {
    "user": {"type": "string"},
    "password": {"type": "string"},
    "location": {"type": "string", "minLength": 1},
    "queues": {"type": "array", "minItems": 1,
               "items": {"type": "string", "minLength": 1}},
    "queuename": {"type": "string", "minLength": 1}
  }
}


class BrokerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: str
    password: str
    host: str
    queues: tuple[str, ...]

    def masked(self) -> dict:
        """Loggable view of the config; never exposes the password."""
        return {"user": self.user, "password": "***", "location": self.host,
                "queues": list(self.queues)}
