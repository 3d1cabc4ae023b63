"""Request bodies for the content API.

Field names arrive in camelCase (`rollId`, `newId`) like the content files.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RenameIn(ApiModel):
    new_id: str = Field(..., description="Target essay id (filename without .yaml)")


class HidePhotoIn(ApiModel):
    roll_id: str = Field(..., description="Manual or derived roll id")
    sequence: str = Field(..., description="Shot sequence label")
    hidden: bool = Field(..., description="New hidden flag")


class DeletePhotoIn(ApiModel):
    roll_id: str = Field(..., description="Manual or derived roll id")
    sequence: str = Field(..., description="Shot sequence label")
    src: str = Field(..., description="Public URL of the image to delete")
