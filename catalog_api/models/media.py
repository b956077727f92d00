from typing import Optional
from pydantic import BaseModel, ConfigDict


class UploadedImage(BaseModel):
    """
    Asset created on the media host by a successful upload.

    public_id and delete_token are kept so the asset can be removed again
    when the product write that follows it fails.
    """

    secure_url: str
    public_id: Optional[str] = None
    delete_token: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
