import io, base64
from flask import Blueprint, current_app, g, jsonify, request, send_file

from .auth import business_required
from .errors import ValidationError
from .models import SOURCE_MANUAL
from .services import services
from .services.cache import check_rate_ip
from .services.qr import make_qr_bytes, redeem_url

bp = Blueprint('api', __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('request body must be a JSON object')
    return data


def _int_value(value, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer')
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise ValidationError(f'{field} must be an integer')


@bp.post('/stamps/generate-qr')
@business_required
def generate_qr():
    data = _json_body()
    if 'stamps_value' not in data:
        raise ValidationError('stamps_value is required')
    stamps_value = _int_value(data['stamps_value'], 'stamps_value')

    issued = services().issuance.issue_stamp_qr(g.business.id, stamps_value)
    url = redeem_url(current_app.config.get('BASE_URL'), issued.token)
    png = make_qr_bytes(url)

    accept = request.headers.get('Accept', '')
    if 'image/png' in accept:
        return send_file(
            io.BytesIO(png), mimetype='image/png', as_attachment=False,
            download_name=f"qr_{issued.redemption_id}.png", etag=False,
        )
    body = issued.to_dict()
    body.update({
        'ok': True,
        'redeem_url': url,
        'qr_png_b64': base64.b64encode(png).decode('ascii'),
    })
    return jsonify(body)


@bp.get('/stamps/qr-status/<redemption_id>')
@business_required
def qr_status(redemption_id: str):
    issued_at = request.args.get('issued_at')
    if issued_at is not None:
        issued_at = _int_value(issued_at, 'issued_at')
    status = services().status.check_status(g.business.id, redemption_id, issued_at=issued_at)
    return jsonify({'redemption_id': redemption_id, 'status': status.value})


@bp.post('/stamps/grant-manual')
@business_required
def grant_manual():
    data = _json_body()
    if 'stamps' not in data:
        raise ValidationError('stamps is required')
    record = services().ledger.grant_manual(
        g.business.id,
        data.get('customer_id'),
        _int_value(data['stamps'], 'stamps'),
        notes=data.get('notes') or '',
        source=data.get('source') or SOURCE_MANUAL,
    )
    return jsonify({'ok': True, 'transaction': record.to_dict()}), 201


@bp.get('/stamps/history')
@business_required
def history():
    limit = _int_value(request.args.get('limit', '50'), 'limit')
    records = services().ledger.history(
        g.business.id, customer_id=request.args.get('customer_id'), limit=limit,
    )
    return jsonify({'transactions': [r.to_dict() for r in records]})


@bp.post('/stamps/redeem')
def redeem():
    svc = services()
    ip = request.remote_addr or '0.0.0.0'
    check_rate_ip(
        svc.store, ip,
        limit=current_app.config.get('RATE_LIMIT_MAX_REQUESTS', 100),
        window=current_app.config.get('RATE_LIMIT_WINDOW_SECONDS', 900),
        now=svc.clock(),
    )
    data = _json_body()
    token = data.get('token')
    customer_id = data.get('customer_id')
    if not isinstance(token, str) or not token:
        raise ValidationError('token is required')
    if not isinstance(customer_id, str) or not customer_id:
        raise ValidationError('customer_id is required')

    record = svc.ledger.redeem(token, customer_id)
    customer = svc.ledger.repository.get_customer(customer_id)
    return jsonify({
        'ok': True,
        'transaction': record.to_dict(),
        'balance': customer.balance() if customer else None,
    }), 201
