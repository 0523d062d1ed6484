from flask import Flask, request, jsonify
from prometheus_client import generate_latest, Counter, CollectorRegistry, CONTENT_TYPE_LATEST

from .config import StoreConfig
from .store import ipfs_store


def create_app(config: StoreConfig, ledger=None, storage_factory=None) -> Flask:
    app = Flask(__name__)
    app.config['STORE_CONFIG'] = config

    registry = CollectorRegistry()
    store_requests = Counter('tanglestore_store_requests_total', 'Total store requests', registry=registry)
    store_failures = Counter('tanglestore_store_failures_total', 'Failed store requests', ['kind'],
                             registry=registry)

    @app.route('/ipfs', methods=['POST'])
    def api_ipfs_store():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'success': False, 'message': 'request body must be a JSON object',
                            'errorKind': 'validation'}), 400
        store_requests.inc()
        response = ipfs_store(app.config['STORE_CONFIG'], data, ledger=ledger, storage_factory=storage_factory)
        if not response.success:
            store_failures.labels(kind=response.error_kind).inc()
            app.logger.warning('store of %r failed (%s)', data.get('name'), response.error_kind)
        return jsonify(response.to_dict())

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    @app.route('/metrics')
    def metrics():
        return generate_latest(registry), 200, {'Content-Type': CONTENT_TYPE_LATEST}

    return app
