from flask import Blueprint, current_app
from authapi.decorators.auth import require_identity
from authapi.services.gate import registered_requirements

meta_bp = Blueprint('meta', __name__)


@meta_bp.get('/routes')
@require_identity
def list_route_requirements():
    """Every guarded route with the requirements attached to it."""
    rules = {}
    for rule in current_app.url_map.iter_rules():
        rules.setdefault(rule.endpoint, []).append(rule)
    data = []
    for endpoint, reqs in registered_requirements():
        for rule in rules.get(endpoint, []):
            data.append({
                'endpoint': endpoint,
                'rule': rule.rule,
                'methods': sorted(m for m in rule.methods if m not in ('HEAD', 'OPTIONS')),
                **reqs.as_dict(),
            })
    return {'data': data}
