from pydantic import Field

from .serde_base import SerdeBase


class AiResponse(SerdeBase):
    status: str = "success"
    ai_response: str = Field(alias="aiResponse")
