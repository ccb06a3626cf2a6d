# rakhimart/integrations/media.py
"""
Product image hosting (Firebase Storage). Takes the uploaded bytes, returns a URL the storefront can show.
Public URL when the bucket allows it, otherwise a long-lived signed URL.
"""
import logging
from typing import List
from uuid import uuid4

from fastapi import HTTPException, UploadFile

logger = logging.getLogger("rakhimart.media")

MAX_IMAGES = 5


class MediaHost:
    def __init__(self, bucket):
        self._bucket = bucket

    def upload(self, product_id: str, img: UploadFile) -> str:
        fname = img.filename or f"{uuid4()}.jpg"
        blob = self._bucket.blob(f"products/{product_id}/{uuid4().hex[:8]}-{fname}")
        blob.upload_from_file(img.file, content_type=img.content_type)
        try:
            blob.make_public()
            return blob.public_url
        except Exception:
            logger.info("bucket refused make_public for %s; using signed URL", blob.name)
            return blob.generate_signed_url(expiration=3600 * 24 * 365 * 10)

    def upload_all(self, product_id: str, images: List[UploadFile]) -> List[str]:
        if len(images) > MAX_IMAGES:
            raise HTTPException(status_code=400, detail=f"Maximum {MAX_IMAGES} images allowed")
        urls = []
        for img in images:
            try:
                urls.append(self.upload(product_id, img))
            except Exception as e:
                logger.exception("image upload failed for product %s", product_id)
                raise HTTPException(status_code=502, detail=f"Image upload failed: {e}")
        return urls
