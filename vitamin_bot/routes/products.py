# vitamin_bot/routes/products.py
"""Public product catalog (/api/products)."""

from __future__ import annotations

import logging

from flask import Blueprint, request

from ..utils.helpers import pagination_block, pagination_params
from .common import error, get_store, ok, require_store

log = logging.getLogger(__name__)
bp = Blueprint("products", __name__, url_prefix="/api/products")


@bp.get("")
@require_store
def list_products():
    page, limit = pagination_params(request.args)
    try:
        products, total = get_store().list_products(
            page=page,
            limit=limit,
            category=request.args.get("category"),
            search=request.args.get("search"),
            active_only=True,
        )
    except Exception as exc:
        log.error(f"CATALOG_LIST_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve products", 500)
    return ok({"success": True, "products": products, "pagination": pagination_block(page, limit, total)})


@bp.get("/<product_id>")
@require_store
def get_product(product_id: str):
    try:
        product = get_store().get_product(product_id, active_only=True)
    except Exception as exc:
        log.error(f"CATALOG_GET_ERROR | product={product_id} | error={exc}", exc_info=True)
        return error("Unable to retrieve product", 500)
    if product is None:
        return error("Product not found", 404)
    return ok({"success": True, "product": product})
