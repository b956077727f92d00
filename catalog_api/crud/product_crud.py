from azure.cosmos.exceptions import CosmosHttpResponseError
from azure.cosmos.aio import ContainerProxy
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from catalog_api.models.product import Product, StoredProduct
from catalog_api.media import ImageFile, MediaUploader
from catalog_api.exceptions import StoreError, UploadError

from catalog_api.logging_config import get_child_logger, tracer

# Create a child logger for this module
logger = get_child_logger("crud.product")


async def _insert_product(container: ContainerProxy, product: Product) -> str:
    data = product.model_dump(by_alias=True)

    try:
        # The store client assigns the id; callers never supply one
        result = await container.create_item(body=data, enable_automatic_id_generation=True)
    except CosmosHttpResponseError as e:
        logger.error(
            "Cosmos DB error during product creation",
            extra={
                "status_code": e.status_code,
                "cosmos_message": e.message,
                "product_name": product.name,
            },
            exc_info=True,
        )
        raise StoreError(
            f"Cosmos DB error during product creation: Status Code {e.status_code}, Message: {e.message}",
            original_exception=e,
        ) from e
    except Exception as e:
        logger.error(
            "Unexpected error during product creation",
            extra={"error_type": type(e).__name__, "product_name": product.name},
            exc_info=True,
        )
        raise StoreError(
            "An unexpected error occurred during database operation.",
            original_exception=e,
        ) from e

    product_id = result["id"]
    logger.info("Product saved", extra={"product_id": product_id, "product_name": product.name})
    return product_id


async def save_product(container: ContainerProxy, product: Product) -> str:
    """
    Insert a product as-is.

    Args:
        container: Cosmos DB container client
        product: Product data to store

    Returns:
        The store-generated product id

    Raises:
        StoreError: If the write fails
    """
    with tracer.start_as_current_span("save_product") as span:
        span.set_attribute("product.name", product.name)
        try:
            product_id = await _insert_product(container, product)
        except StoreError:
            span.set_attribute("error", True)
            raise
        span.set_attribute("product.id", product_id)
        return product_id


async def save_product_with_image(
    container: ContainerProxy,
    uploader: Optional[MediaUploader],
    product: Product,
    image_file: Optional[ImageFile] = None,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
) -> str:
    """
    Upload the product image, if any, then insert the product.

    The uploaded URL replaces ``product.image``. An upload failure aborts
    before anything is written. If the write fails after an upload, the
    uploaded image is deleted again before the StoreError is re-raised.

    Raises:
        UploadError: If the image upload fails
        StoreError: If the write fails
    """
    with tracer.start_as_current_span("save_product_with_image") as span:
        span.set_attribute("product.name", product.name)
        span.set_attribute("product.has_image_file", image_file is not None)

        if image_file is None:
            product_id = await _insert_product(container, product)
            span.set_attribute("product.id", product_id)
            return product_id

        try:
            uploaded = await uploader.upload_image(image_file, filename=filename, content_type=content_type)
        except UploadError:
            span.set_attribute("error", True)
            span.set_attribute("error.type", "upload_error")
            logger.error("Image upload failed, product not saved", extra={"product_name": product.name})
            raise

        product.image = uploaded.secure_url

        try:
            product_id = await _insert_product(container, product)
        except StoreError:
            span.set_attribute("error", True)
            span.set_attribute("error.type", "store_error")
            logger.warning(
                "Product write failed after upload, deleting uploaded image",
                extra={"product_name": product.name, "secure_url": uploaded.secure_url},
            )
            try:
                await uploader.delete(uploaded)
            except UploadError:
                logger.error(
                    "Could not delete uploaded image, it is now orphaned",
                    extra={"secure_url": uploaded.secure_url},
                    exc_info=True,
                )
            raise

        span.set_attribute("product.id", product_id)
        return product_id


def _to_stored_product(item: Dict[str, Any]) -> StoredProduct:
    try:
        return StoredProduct.model_validate(item)
    except ValidationError as e:
        # Wrongly typed fields fall back to their defaults instead of failing the scan
        bad_fields = {error["loc"][0] for error in e.errors() if error["loc"]}
        logger.warning(
            "Stored product has malformed fields, using defaults",
            extra={"product_id": item.get("id"), "fields": sorted(map(str, bad_fields))},
        )
        cleaned = {key: value for key, value in item.items() if key not in bad_fields}

    try:
        return StoredProduct.model_validate(cleaned)
    except ValidationError as e:
        raise StoreError(
            f"Stored product {item.get('id')!r} could not be read",
            original_exception=e,
        ) from e


async def get_products(container: ContainerProxy) -> List[StoredProduct]:
    """
    Read every product in the catalog.

    Missing sizes/availableSizes come back as empty lists. Order is whatever
    the store returns.

    Raises:
        StoreError: If the scan fails
    """
    with tracer.start_as_current_span("get_products") as span:
        try:
            items = [item async for item in container.read_all_items()]
        except CosmosHttpResponseError as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", "cosmos_http_error")
            span.set_attribute("error.status_code", e.status_code)
            logger.error(
                "Cosmos DB error during product listing",
                extra={"status_code": e.status_code, "cosmos_message": e.message},
                exc_info=True,
            )
            raise StoreError(
                f"Cosmos DB error during product listing: Status Code {e.status_code}, Message: {e.message}",
                original_exception=e,
            ) from e
        except Exception as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)
            logger.error(
                "Unexpected error during product listing",
                extra={"error_type": type(e).__name__},
                exc_info=True,
            )
            raise StoreError(
                "An unexpected error occurred during database operation.",
                original_exception=e,
            ) from e

        products = [_to_stored_product(item) for item in items]

        logger.info(f"Retrieved {len(products)} products", extra={"count": len(products)})
        span.set_attribute("products.count", len(products))
        return products
