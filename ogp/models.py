"""OGP image generation Pydantic models."""
from typing import Any, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


ContentType = Literal["file", "dir"]


class DirectoryItem(BaseModel):
    """One entry of a directory listing."""
    name: str
    type: ContentType


class OgpImageRequest(BaseModel):
    """Content description for an OGP image. Every field is optional."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    content: Optional[str] = None
    background_color: str = Field("#ffffff", alias="backgroundColor")
    content_type: ContentType = Field("file", alias="contentType")
    directory_content: Optional[List[DirectoryItem]] = Field(None, alias="directoryContent")

    @field_validator("title", "description", "background_color", "content_type", mode="before")
    @classmethod
    def _null_means_default(cls, value: Any, info) -> Any:
        # an explicit null is the same request as an omitted field
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class OgpImageResponse(BaseModel):
    image_url: str = Field(..., alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True)
