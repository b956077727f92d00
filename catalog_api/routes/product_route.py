from functools import lru_cache
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from catalog_api.catalog import Catalog
from catalog_api.exceptions import StoreError, UploadError
from catalog_api.models.product import ProductCreate, ProductCreated, StoredProduct

from catalog_api.logging_config import tracer, get_child_logger

# Create a child logger for this module
logger = get_child_logger("routes.product")

router = APIRouter(prefix="/products", tags=["products"])


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    return Catalog.from_env()


def _store_failure(e: StoreError, action: str) -> HTTPException:
    logger.error(f"Database error during {action}: {e}", exc_info=e.original_exception)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="A database error occurred.",
    )


@router.get("/", response_model=List[StoredProduct], response_model_by_alias=True)
async def list_all_products(catalog: Catalog = Depends(get_catalog)):
    with tracer.start_as_current_span("api_get_products") as span:
        logger.info("Handling GET /products request")
        try:
            result = await catalog.get_products()
        except StoreError as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", "store_error")
            raise _store_failure(e, "product listing")

        span.set_attribute("products.count", len(result))
        return result


@router.post("/", response_model=ProductCreated, status_code=status.HTTP_201_CREATED)
async def add_new_product(
    product: ProductCreate = Body(..., description="Product information to store"),
    catalog: Catalog = Depends(get_catalog),
):
    try:
        product_id = await catalog.save_product(product)
    except StoreError as e:
        raise _store_failure(e, "product creation")
    return ProductCreated(id=product_id)


@router.post("/with-image", response_model=ProductCreated, status_code=status.HTTP_201_CREATED)
async def add_new_product_with_image(
    product: str = Form(..., description="Product information as a JSON document"),
    image: Optional[UploadFile] = File(None, description="Product image to upload"),
    catalog: Catalog = Depends(get_catalog),
):
    with tracer.start_as_current_span("api_add_product_with_image") as span:
        span.set_attribute("product.has_image_file", image is not None)
        try:
            new_product = ProductCreate.model_validate_json(product)
        except ValidationError as e:
            raise RequestValidationError(e.errors())

        try:
            if image is None:
                product_id = await catalog.save_product_with_image(new_product)
            else:
                product_id = await catalog.save_product_with_image(
                    new_product,
                    image_file=await image.read(),
                    filename=image.filename,
                    content_type=image.content_type,
                )
        except UploadError as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", "upload_error")
            logger.error(
                f"Image upload error: {e}",
                extra={"status_code": e.status_code},
                exc_info=e.original_exception,
            )
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="The image could not be uploaded.",
            )
        except StoreError as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", "store_error")
            raise _store_failure(e, "product creation")

        return ProductCreated(id=product_id)
