from __future__ import annotations
from flask import abort, request
from sqlalchemy import select
from authapi.constants.permissions import RES_PRODUCT, CLAIM_READ, CLAIM_WRITE, ACT_DELETE
from authapi.models.category import Category
from authapi.models.product import Product
from authapi.services.gate import GuardedBlueprint
from authapi.services.requirements import ClaimRequirement, PermissionRequirement
from authapi.utils.listing import paginated
from authapi.utils.validation import (
    json_body, required_str, optional_str, positive_decimal, non_negative_int, required_int, matching_id,
)
from authapi import get_db

products_bp = GuardedBlueprint('products', __name__)

READ = ClaimRequirement(CLAIM_READ, RES_PRODUCT)
WRITE = ClaimRequirement(CLAIM_WRITE, RES_PRODUCT)


def _product_json(p: Product):
    return {
        'id': p.id,
        'name': p.name,
        'description': p.description,
        'price': float(p.price),
        'stock': p.stock,
        'category_id': p.category_id,
        'category': {'id': p.category.id, 'name': p.category.name} if p.category else None,
        'created_at': p.created_at.isoformat() if p.created_at else None,
        'updated_at': p.updated_at.isoformat() if p.updated_at else None,
    }


def _get_or_404(product_id: int) -> Product:
    product = get_db().execute(select(Product).where(Product.id == product_id)).scalar_one_or_none()
    if not product:
        abort(404)
    return product


def _apply_fields(product: Product, data):
    product.name = required_str(data, 'name', Product.NAME_MAX)
    product.description = optional_str(data, 'description', Product.DESCRIPTION_MAX)
    product.price = positive_decimal(data, 'price')
    product.stock = non_negative_int(data, 'stock')
    category_id = required_int(data, 'category_id')
    if get_db().get(Category, category_id) is None:
        abort(400, description='Unknown category_id')
    product.category_id = category_id


@products_bp.get('/products', claim=READ)
def list_products():
    q = get_db().query(Product)
    if category_id := request.args.get('category_id'):
        try:
            q = q.filter(Product.category_id == int(category_id))
        except ValueError:
            abort(400, description='category_id must be int')
    if name := request.args.get('name'):
        q = q.filter(Product.name.ilike(f"%{name}%"))
    allowed = {'name': Product.name, 'price': Product.price, 'stock': Product.stock, 'id': Product.id}
    return paginated(q, _product_json, allowed, Product.id)


@products_bp.get('/products/<int:product_id>', claim=READ)
def get_product(product_id: int):
    return _product_json(_get_or_404(product_id))


@products_bp.post('/products', claim=WRITE)
def create_product():
    data = json_body()
    product = Product()
    _apply_fields(product, data)
    session = get_db()
    session.add(product)
    session.commit()
    return _product_json(product), 201


@products_bp.put('/products/<int:product_id>', claim=WRITE)
def update_product(product_id: int):
    data = json_body()
    matching_id(data, product_id)
    product = _get_or_404(product_id)
    _apply_fields(product, data)
    get_db().commit()
    return '', 204


# Removing stock items needs the write claim and an explicit delete grant
@products_bp.delete(
    '/products/<int:product_id>',
    permission=PermissionRequirement(ACT_DELETE, RES_PRODUCT),
    claim=WRITE,
)
def delete_product(product_id: int):
    session = get_db()
    product = _get_or_404(product_id)
    session.delete(product)
    session.commit()
    return '', 204
