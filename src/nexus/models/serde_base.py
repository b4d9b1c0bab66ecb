from pydantic import BaseModel, ConfigDict


class SerdeBase(BaseModel):
    """Immutable wire model; accepts both field names and wire aliases."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
