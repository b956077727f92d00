import hashlib
import time
from typing import Any, BinaryIO, Dict, Optional, Union

import httpx

from catalog_api.config import MediaSettings
from catalog_api.exceptions import UploadError
from catalog_api.logging_config import get_child_logger, tracer
from catalog_api.models.media import UploadedImage

logger = get_child_logger("media")

UPLOAD_PRESET = "ml_default"

ImageFile = Union[bytes, BinaryIO]


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """
    Compute a media host request signature.

    Parameters are sorted by name and joined as ``key=value`` pairs with ``&``;
    the API secret is appended and the result hashed with SHA-1.
    """
    to_sign = "&".join(
        f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, "")
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def _error_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


class MediaUploader:
    """
    Thin client for the hosted image upload API.

    Uploads are signed when the settings carry an API key and secret,
    otherwise they rely on the upload preset alone.
    """

    def __init__(self, settings: MediaSettings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._client = client

    def _url(self, path: str) -> str:
        base_url = self.settings.api_base_url.rstrip("/")
        return f"{base_url}/v1_1/{self.settings.cloud_name}/{path}"

    def _signed_fields(self, params: Dict[str, Any]) -> Dict[str, Any]:
        fields = dict(params)
        fields["timestamp"] = int(time.time())
        fields["signature"] = sign_params(fields, self.settings.api_secret)
        fields["api_key"] = self.settings.api_key
        return fields

    async def _post(self, url: str, data: Dict[str, Any], files=None) -> httpx.Response:
        if self._client is not None:
            response = await self._client.post(url, data=data, files=files)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(url, data=data, files=files)
        response.raise_for_status()
        return response

    async def upload(
        self,
        file: ImageFile,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload an image and return its public HTTPS URL.

        Raises:
            UploadError: If the media host cannot be reached or rejects the upload
        """
        uploaded = await self.upload_image(file, filename=filename, content_type=content_type)
        return uploaded.secure_url

    async def upload_image(
        self,
        file: ImageFile,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> UploadedImage:
        """
        Upload an image and return the created asset.

        Args:
            file: Raw bytes or a binary file object
            filename: Name sent with the multipart part
            content_type: MIME type sent with the multipart part

        Returns:
            The uploaded asset (URL, public id, delete token when issued)

        Raises:
            UploadError: If the media host cannot be reached or rejects the upload
        """
        with tracer.start_as_current_span("upload_image") as span:
            span.set_attribute("media.signed", self.settings.signed)

            data: Dict[str, Any] = {"upload_preset": UPLOAD_PRESET}
            if self.settings.signed:
                data = self._signed_fields(data)

            part = (filename or "upload", file, content_type or "application/octet-stream")

            try:
                response = await self._post(self._url("image/upload"), data=data, files={"file": part})
            except httpx.HTTPStatusError as e:
                payload = _error_payload(e.response)
                span.set_attribute("error", True)
                span.set_attribute("error.status_code", e.response.status_code)
                logger.error(
                    "Error uploading image",
                    extra={"status_code": e.response.status_code, "payload": payload},
                )
                raise UploadError(
                    f"Image upload rejected: Status Code {e.response.status_code}, Payload: {payload}",
                    payload=payload,
                    status_code=e.response.status_code,
                    original_exception=e,
                ) from e
            except httpx.HTTPError as e:
                span.set_attribute("error", True)
                span.set_attribute("error.type", type(e).__name__)
                logger.error(f"Error uploading image: {e}", exc_info=True)
                raise UploadError(
                    f"Image upload failed: {e}",
                    original_exception=e,
                ) from e

            body = _error_payload(response)
            if not isinstance(body, dict) or not body.get("secure_url"):
                logger.error("Upload response has no secure_url", extra={"payload": body})
                raise UploadError(
                    "Image upload response did not contain a secure_url",
                    payload=body,
                    status_code=response.status_code,
                )

            uploaded = UploadedImage.model_validate(body)
            span.set_attribute("media.public_id", uploaded.public_id or "")
            logger.info(
                "Image uploaded successfully",
                extra={"secure_url": uploaded.secure_url, "public_id": uploaded.public_id},
            )
            return uploaded

    async def delete(self, image: UploadedImage) -> bool:
        """
        Remove a previously uploaded asset from the media host.

        Uses a signed destroy call when credentials are configured, otherwise
        the delete token issued with the upload.

        Returns:
            True if a delete request was accepted, False if the asset could
            not be addressed (no credentials and no delete token)

        Raises:
            UploadError: If the media host rejects the delete request
        """
        if self.settings.signed and image.public_id:
            url = self._url("image/destroy")
            data = self._signed_fields({"public_id": image.public_id})
        elif image.delete_token:
            url = self._url("delete_by_token")
            data = {"token": image.delete_token}
        else:
            logger.warning(
                "Uploaded image cannot be deleted, no credentials or delete token",
                extra={"secure_url": image.secure_url},
            )
            return False

        try:
            await self._post(url, data=data)
        except httpx.HTTPStatusError as e:
            payload = _error_payload(e.response)
            logger.error(
                "Error deleting uploaded image",
                extra={"status_code": e.response.status_code, "payload": payload},
            )
            raise UploadError(
                f"Image delete rejected: Status Code {e.response.status_code}, Payload: {payload}",
                payload=payload,
                status_code=e.response.status_code,
                original_exception=e,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Error deleting uploaded image: {e}", exc_info=True)
            raise UploadError(f"Image delete failed: {e}", original_exception=e) from e

        logger.info("Uploaded image deleted", extra={"secure_url": image.secure_url})
        return True
