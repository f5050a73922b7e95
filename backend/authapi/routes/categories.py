from __future__ import annotations
from flask import abort
from sqlalchemy import select, func
from authapi.constants.permissions import RES_CATEGORY, ACT_READ, ACT_CREATE, ACT_UPDATE, ACT_DELETE
from authapi.models.category import Category
from authapi.models.product import Product
from authapi.services.gate import GuardedBlueprint
from authapi.services.requirements import PermissionRequirement
from authapi.utils.listing import paginated
from authapi.utils.validation import json_body, required_str, optional_str, matching_id
from authapi import get_db

categories_bp = GuardedBlueprint('categories', __name__)

READ = PermissionRequirement(ACT_READ, RES_CATEGORY)


def _product_json(p: Product):
    return {
        'id': p.id,
        'name': p.name,
        'description': p.description,
        'price': float(p.price),
        'stock': p.stock,
        'category_id': p.category_id,
    }


def _category_json(c: Category, with_products: bool = False):
    body = {
        'id': c.id,
        'name': c.name,
        'description': c.description,
        'created_at': c.created_at.isoformat() if c.created_at else None,
        'updated_at': c.updated_at.isoformat() if c.updated_at else None,
    }
    if with_products:
        body['products'] = [_product_json(p) for p in c.products]
    return body


def _get_or_404(category_id: int) -> Category:
    category = get_db().execute(select(Category).where(Category.id == category_id)).scalar_one_or_none()
    if not category:
        abort(404)
    return category


@categories_bp.get('/categories', permission=READ)
def list_categories():
    q = get_db().query(Category)
    allowed = {'name': Category.name, 'id': Category.id, 'created_at': Category.created_at}
    return paginated(q, lambda c: _category_json(c, with_products=True), allowed, Category.id)


@categories_bp.get('/categories/<int:category_id>', permission=READ)
def get_category(category_id: int):
    return _category_json(_get_or_404(category_id), with_products=True)


@categories_bp.post('/categories', permission=PermissionRequirement(ACT_CREATE, RES_CATEGORY))
def create_category():
    data = json_body()
    category = Category(
        name=required_str(data, 'name', Category.NAME_MAX),
        description=optional_str(data, 'description', Category.DESCRIPTION_MAX),
    )
    session = get_db()
    session.add(category)
    session.commit()
    return _category_json(category), 201


@categories_bp.put('/categories/<int:category_id>', permission=PermissionRequirement(ACT_UPDATE, RES_CATEGORY))
def update_category(category_id: int):
    data = json_body()
    matching_id(data, category_id)
    category = _get_or_404(category_id)
    category.name = required_str(data, 'name', Category.NAME_MAX)
    category.description = optional_str(data, 'description', Category.DESCRIPTION_MAX)
    get_db().commit()
    return '', 204


@categories_bp.delete('/categories/<int:category_id>', permission=PermissionRequirement(ACT_DELETE, RES_CATEGORY))
def delete_category(category_id: int):
    session = get_db()
    category = _get_or_404(category_id)
    in_use = session.execute(select(func.count(Product.id)).where(Product.category_id == category_id)).scalar_one()
    if in_use:
        abort(400, description='Cannot delete category that contains products.')
    session.delete(category)
    session.commit()
    return '', 204
