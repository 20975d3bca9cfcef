from flask import Blueprint, jsonify, request

from .auth import admin_required, issue_business_token
from .errors import BusinessNotFound, ValidationError
from .models import db, Business

bp = Blueprint('admin', __name__)


@bp.get('/ping')
def ping():
    return jsonify({'admin': 'ok'})


@bp.post('/business-token')
@admin_required
def business_token():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    business_id = data.get('business_id')
    if not isinstance(business_id, str) or not business_id:
        raise ValidationError('business_id is required')
    if db.session.get(Business, business_id) is None:
        raise BusinessNotFound()
    return jsonify({'ok': True, 'business_id': business_id, 'token': issue_business_token(business_id)})
