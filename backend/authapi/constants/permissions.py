"""Resource type and action names used in route requirements and seed data.

Grants are matched by exact string, so these names are part of the stored data.
Never rename one silently: add the new name and migrate existing grants.
"""
from __future__ import annotations
from typing import Dict, List

SUBJECT_TYPE_USER = 'User'

# Permission-guarded resource types
RES_CATEGORY = 'Category'
RES_PERMISSION = 'Permission'
RES_CLAIM = 'Claim'
RES_NAVIGATION = 'Navigation'
RES_PRODUCT = 'Product'

# Permission actions
ACT_READ = 'Read'
ACT_CREATE = 'Create'
ACT_UPDATE = 'Update'
ACT_DELETE = 'Delete'

# Claim actions (lowercase, as stored on product claims)
CLAIM_READ = 'read'
CLAIM_WRITE = 'write'

ADMIN_ROLE = 'Admin'

PERMISSION_ACTIONS: Dict[str, List[str]] = {
    RES_CATEGORY: [ACT_READ, ACT_CREATE, ACT_UPDATE, ACT_DELETE],
    RES_PERMISSION: [ACT_READ, ACT_CREATE, ACT_UPDATE, ACT_DELETE],
    RES_CLAIM: [ACT_READ, ACT_CREATE, ACT_UPDATE, ACT_DELETE],
    RES_NAVIGATION: [ACT_READ, ACT_CREATE, ACT_UPDATE, ACT_DELETE],
    RES_PRODUCT: [ACT_DELETE],
}

CLAIM_ACTIONS: Dict[str, List[str]] = {
    RES_PRODUCT: [CLAIM_READ, CLAIM_WRITE],
}
