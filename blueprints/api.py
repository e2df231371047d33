"""
REST API blueprint for depreciation schedules.

Authentication (optional): when the API_KEY setting is non-empty, requests
must send the header  Authorization: Bearer <API_KEY>.

All responses are JSON. Field names on the wire are camelCase.
Dates are ISO 8601 (YYYY-MM-DD).
"""

from functools import wraps

from flask import Blueprint, current_app, jsonify, request

from depreciation import DepreciationError, compute_schedule, get_book_value, summarize_by_fiscal_year
from helpers import parse_amount, parse_count, parse_date
from models import DepreciationEntry, DepreciationRecord, db

api_bp = Blueprint('api', __name__)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def require_api_key(f):
    """Decorator: require the configured API key in the Authorization header."""
    @wraps(f)
    def decorated(*args, **kwargs):
        api_key = current_app.config.get('API_KEY')
        if api_key:
            auth = request.headers.get('Authorization', '')
            if not auth.startswith('Bearer ') or auth[7:] != api_key:
                return jsonify({'error': 'Unauthorized. Provide header: Authorization: Bearer <API_KEY>'}), 401
        return f(*args, **kwargs)
    return decorated


# ---------------------------------------------------------------------------
# Helpers: parsing and serialization
# ---------------------------------------------------------------------------

def _parse_depreciation_input(data):
    """
    Turn a request body into compute_schedule() keyword arguments.

    Raises ValueError with a user-facing message on malformed fields.
    The purchase date is passed through untouched; the engine validates it.
    """
    company_id = str(data.get('companyId') or '').strip()
    asset_id = str(data.get('assetId') or '').strip()
    if not company_id or not asset_id:
        raise ValueError('companyId and assetId are required')

    # 'months' is the field name older clients send
    period_count = data.get('periodCount', data.get('months'))

    try:
        cost = parse_amount(data.get('cost'))
        depreciation_rate = parse_amount(data.get('depreciationRate'))
        period_count = parse_count(period_count)
    except ValueError:
        raise ValueError('cost, depreciationRate and periodCount must be numbers') from None

    if cost is None:
        raise ValueError('cost is required')

    return {
        'cost': cost,
        'depreciation_rate': depreciation_rate,
        'period_count': period_count,
        'purchase_date': data.get('purchaseDate'),
        'company_id': company_id,
        'asset_id': asset_id,
    }


def _compute(params):
    return compute_schedule(max_periods=current_app.config['MAX_SCHEDULE_PERIODS'], **params)


def _entry_to_dict(e):
    """Serialize one schedule entry (engine dict) to the wire format."""
    return {
        'period': e['period'],
        'date': e['date'],
        'fiscalYear': e['fiscal_year'],
        'depreciationAmount': e['depreciation_amount'],
        'cumulative': e['cumulative'],
        'bookValue': e['book_value'],
    }


def _totals_to_dict(entries):
    return [
        {'fiscalYear': t['fiscal_year'], 'amount': t['amount'], 'periods': t['periods']}
        for t in summarize_by_fiscal_year(entries)
    ]


def _record_to_dict(r):
    """Serialize a DepreciationRecord to a dict."""
    schedule = r.schedule
    return {
        'id': r.id,
        'companyId': r.company_id,
        'assetId': r.asset_id,
        'cost': r.cost,
        'depreciationRate': r.depreciation_rate,
        'periodCount': r.period_count,
        'purchaseDate': r.purchase_date.isoformat(),
        'periodsCalculated': r.periods_calculated,
        'totalDepreciation': r.total_depreciation,
        'createdAt': r.created_at.isoformat() if r.created_at else None,
        'depreciationSchedule': [_entry_to_dict(e) for e in schedule],
        'fiscalYearTotals': _totals_to_dict(schedule),
    }


def _filtered_query():
    """
    Build a record query from the companyId / assetId query params.

    Returns None when neither filter is given.
    """
    company_id = request.args.get('companyId', '').strip()
    asset_id = request.args.get('assetId', '').strip()
    if not company_id and not asset_id:
        return None

    query = DepreciationRecord.query
    if company_id:
        query = query.filter_by(company_id=company_id)
    if asset_id:
        query = query.filter_by(asset_id=asset_id)
    return query


# ---------------------------------------------------------------------------
# Depreciation schedules
# ---------------------------------------------------------------------------

@api_bp.route('/depreciation', methods=['POST'])
@require_api_key
def create_depreciation():
    """
    Calculate a schedule and store it.
    Body: { companyId, assetId, cost, depreciationRate | periodCount, purchaseDate }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object body required'}), 400

    try:
        params = _parse_depreciation_input(data)
        entries, total_periods = _compute(params)
    except DepreciationError as e:
        return jsonify({'error': str(e), 'kind': e.kind}), 400
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    try:
        record = DepreciationRecord(
            company_id=params['company_id'],
            asset_id=params['asset_id'],
            cost=params['cost'],
            depreciation_rate=params['depreciation_rate'],
            period_count=params['period_count'],
            purchase_date=parse_date(params['purchase_date']),
            periods_calculated=total_periods,
            entries=[DepreciationEntry.from_schedule_entry(e) for e in entries],
        )
        db.session.add(record)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Error saving depreciation schedule for %s/%s',
                                     params['company_id'], params['asset_id'])
        return jsonify({'error': 'Internal server error'}), 500

    current_app.logger.info('Stored depreciation schedule %d for %s/%s (%d periods).',
                            record.id, record.company_id, record.asset_id, total_periods)
    return jsonify({
        'message': 'Depreciation calculated and saved successfully',
        'depreciation': _record_to_dict(record),
    })


@api_bp.route('/depreciation/preview', methods=['POST'])
@require_api_key
def preview_depreciation():
    """Calculate a schedule without storing it. Same body as POST /depreciation."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object body required'}), 400

    try:
        entries, total_periods = _compute(_parse_depreciation_input(data))
    except DepreciationError as e:
        return jsonify({'error': str(e), 'kind': e.kind}), 400
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({
        'periodsCalculated': total_periods,
        'depreciationSchedule': [_entry_to_dict(e) for e in entries],
        'fiscalYearTotals': _totals_to_dict(entries),
    })


@api_bp.route('/depreciation', methods=['GET'])
@require_api_key
def list_depreciation():
    """
    List stored schedules.   Query params: companyId and/or assetId (at least one).
    """
    query = _filtered_query()
    if query is None:
        return jsonify({'error': 'companyId or assetId is required'}), 400

    records = query.order_by(DepreciationRecord.created_at, DepreciationRecord.id).all()
    return jsonify({'depreciation': [_record_to_dict(r) for r in records]})


@api_bp.route('/depreciation/<int:record_id>', methods=['GET'])
@require_api_key
def get_depreciation(record_id):
    """
    Get a single stored schedule.
    Optional query param: asOf (YYYY-MM-DD) adds the book value on that date.
    """
    record = db.session.get(DepreciationRecord, record_id)
    if not record:
        return jsonify({'error': f'Depreciation record {record_id} not found'}), 404

    d = _record_to_dict(record)
    as_of = request.args.get('asOf', '').strip()
    if as_of:
        try:
            as_of_date = parse_date(as_of)
        except ValueError:
            return jsonify({'error': f'Invalid asOf date: {as_of}'}), 400
        d['asOf'] = as_of_date.isoformat()
        d['bookValue'] = get_book_value(record.schedule, record.cost, as_of_date)
    return jsonify({'depreciation': d})


@api_bp.route('/depreciation', methods=['DELETE'])
@require_api_key
def delete_depreciation():
    """
    Delete every stored schedule matching companyId and/or assetId.
    """
    query = _filtered_query()
    if query is None:
        return jsonify({'error': 'companyId or assetId is required'}), 400

    try:
        records = query.all()
        if not records:
            return jsonify({'error': 'No depreciation records found for the given filter'}), 404
        for r in records:
            db.session.delete(r)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Error deleting depreciation records')
        return jsonify({'error': 'Internal server error'}), 500

    current_app.logger.info('Deleted %d depreciation record(s) (companyId=%s, assetId=%s).',
                            len(records), request.args.get('companyId'), request.args.get('assetId'))
    return jsonify({'message': 'Depreciation records deleted successfully', 'count': len(records)})
