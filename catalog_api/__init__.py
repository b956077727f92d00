"""
Catalog API Package

Product catalog persistence: image uploads to the media host and product
documents in Cosmos DB.
"""

from catalog_api.catalog import Catalog
from catalog_api.exceptions import StoreError, UploadError
from catalog_api.models.product import Product, StoredProduct

__all__ = ['Catalog', 'Product', 'StoredProduct', 'StoreError', 'UploadError']
