from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Any, List, Optional


def _as_tag_list(value: Any) -> List[str]:
    # Older documents stored category as a bare string ("" when unset)
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return value


class Product(BaseModel):
    """
    Product record as supplied by the storefront.
    """

    name: str
    price: float
    image: Optional[str] = None  # Public image URL, filled in by an upload
    sizes: List[str] = Field(default_factory=list)
    available_sizes: List[str] = Field(default_factory=list, alias="availableSizes")
    category: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value):
        return _as_tag_list(value)


class ProductCreate(Product):
    """
    Fields a client needs to provide to create a product.
    """

    pass


class StoredProduct(BaseModel):
    """
    Product as read back from the catalog, with its store-assigned id.

    Missing name or price come back as None rather than failing the scan.
    """

    id: str
    name: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None
    sizes: List[str] = Field(default_factory=list)
    available_sizes: List[str] = Field(default_factory=list, alias="availableSizes")
    category: List[str] = Field(default_factory=list)

    # Cosmos DB system fields (_rid, _etag, _ts, ...) are dropped
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("sizes", "available_sizes", mode="before")
    @classmethod
    def default_missing_sizes(cls, value):
        return [] if value is None else value

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value):
        return _as_tag_list(value)


class ProductCreated(BaseModel):
    """
    Response returned after a product has been stored.
    """

    id: str
