"""Minimal stand-in for the IPFS HTTP API, for local runs without a daemon.

Implements /api/v0/add and /api/v0/version. Stored content is kept under
IPFS_SIM_DATA_DIR keyed by its sha256, which is also returned as the hash.
"""
from flask import Flask, request, jsonify
from pathlib import Path
import hashlib
import os

app = Flask(__name__)
DATA_DIR = Path(os.environ.get('IPFS_SIM_DATA_DIR', '/data/ipfs-sim'))
DATA_DIR.mkdir(parents=True, exist_ok=True)


@app.route('/api/v0/add', methods=['POST'])
def add():
    f = request.files.get('file')
    if f is None:
        return jsonify({'Message': 'file argument required', 'Code': 0, 'Type': 'error'}), 400
    content = f.read()
    h = 'sim' + hashlib.sha256(content).hexdigest()
    (DATA_DIR / h).write_bytes(content)
    return jsonify({'Name': f.filename or h, 'Hash': h, 'Size': str(len(content))})


@app.route('/api/v0/cat', methods=['POST'])
def cat():
    h = request.args.get('arg')
    p = DATA_DIR / (h or '')
    if not h or not p.is_file():
        return jsonify({'Message': 'not found', 'Code': 0, 'Type': 'error'}), 404
    return p.read_bytes(), 200, {'Content-Type': 'application/octet-stream'}


@app.route('/api/v0/version', methods=['POST'])
def version():
    return jsonify({'Version': '0.0.0-sim', 'System': 'ipfs-sim'})


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 5001)))
