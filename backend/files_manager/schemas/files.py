"""File schemas — camelCase on the wire, snake_case in Python."""

from pydantic import BaseModel, ConfigDict, Field


class FileCreate(BaseModel):
    """Upload body. Every field is optional here; the service reports
    which one is missing with a 400."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    type: str | None = None
    parent_id: int | str = Field(0, alias="parentId")
    is_public: bool = Field(False, alias="isPublic")
    data: str | None = None


class FileResponse(BaseModel):
    """Canonical file record representation."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    name: str
    type: str
    is_public: bool = Field(alias="isPublic")
    parent_id: int | str = Field(alias="parentId")
