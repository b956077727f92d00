import os
from typing import List, Optional

from catalog_api.config import media_settings_from_env
from catalog_api.crud import product_crud
from catalog_api.db import ContainerType, CosmosStore, get_default_store
from catalog_api.media import ImageFile, MediaUploader
from catalog_api.models.product import Product, StoredProduct


class Catalog:
    """
    Entry point for storefront callers: binds a store handle and an uploader.

    ``store`` is anything with an async ``get_container()``; tests pass a fake.
    Without an explicit uploader, one is built from the environment the first
    time an image is uploaded, so the store works with Cosmos settings alone.
    """

    def __init__(self, store: CosmosStore, uploader: Optional[MediaUploader] = None):
        self.store = store
        self._uploader = uploader

    @classmethod
    def from_env(cls) -> "Catalog":
        return cls(get_default_store())

    @property
    def uploader(self) -> MediaUploader:
        if self._uploader is None:
            self._uploader = MediaUploader(media_settings_from_env(os.environ))
        return self._uploader

    async def _products_container(self):
        return await self.store.get_container(ContainerType.PRODUCTS)

    async def save_product(self, product: Product) -> str:
        container = await self._products_container()
        return await product_crud.save_product(container, product)

    async def save_product_with_image(
        self,
        product: Product,
        image_file: Optional[ImageFile] = None,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        uploader = self.uploader if image_file is not None else None
        container = await self._products_container()
        return await product_crud.save_product_with_image(
            container,
            uploader,
            product,
            image_file=image_file,
            filename=filename,
            content_type=content_type,
        )

    async def get_products(self) -> List[StoredProduct]:
        container = await self._products_container()
        return await product_crud.get_products(container)

    async def close(self) -> None:
        await self.store.close()
