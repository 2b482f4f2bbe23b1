"""Catalog lookup client (``GET /api/products/{id}``)."""
from __future__ import annotations

import logging

from pydantic import ValidationError

from storefront.api.schemas import ProductSchema
from storefront.core.exceptions import ProductNotFoundException, TransportException
from storefront.domain.cart import Product

from .http_client import BaseApiClient

logger = logging.getLogger(__name__)


class CatalogClient(BaseApiClient):
    """Fetch product records by id."""

    async def get_product(self, product_id: int) -> Product:
        try:
            _, data = await self._request_json("GET", f"/api/products/{int(product_id)}")
        except TransportException as exc:
            if exc.status == 404:
                raise ProductNotFoundException(product_id) from exc
            raise

        try:
            return ProductSchema.model_validate(data).to_domain()
        except ValidationError as exc:
            logger.warning("Malformed product %s from catalog: %s", product_id, exc)
            raise TransportException(f"Malformed product record for ID {product_id}") from exc
