"""IPFS integration wrapper.

Talks to an IPFS daemon (or a hosted pinning service) through its HTTP API.
The provider is configured as `scheme://host:port/api-path`, for example
`https://ipfs.infura.io:5001/api/v0`.
"""
import json
import logging
import re
from typing import Optional

import requests

from .errors import ConfigParseError, UploadError

logger = logging.getLogger(__name__)

PROVIDER_RE = re.compile(r'^(https?)://(.*):(\d+)(.*)$')


def parse_provider(provider: str, token: Optional[str] = None) -> dict:
    """Split a provider URL into the client settings.

    Returns a dict with protocol, host, port, api_path and headers. When a
    token is configured it is sent as a Basic authorization header.
    """
    m = PROVIDER_RE.match(provider or '')
    if not m:
        raise ConfigParseError(f"The IPFS provider '{provider}' does not match scheme://host:port/path")
    headers = None
    if token:
        headers = {'Authorization': f'Basic {token}'}
    return {
        'protocol': m.group(1),
        'host': m.group(2),
        'port': int(m.group(3)),
        'api_path': m.group(4) or '/api/v0',
        'headers': headers,
    }


def _parse_add_response(text: str) -> dict:
    # /add answers with one JSON object per line; the last one describes the root
    last = None
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except ValueError:
            continue
        if isinstance(obj, dict):
            last = obj
    if not last or not last.get('Hash'):
        raise UploadError(f'IPFS add returned no hash: {text[:200]}')
    return last


class IpfsClient:
    def __init__(self, protocol: str, host: str, port: int, api_path: str = '/api/v0',
                 headers: Optional[dict] = None, timeout: int = 30):
        self.protocol = protocol
        self.host = host
        self.port = port
        self.api_path = api_path
        self.headers = headers or {}
        self.timeout = timeout

    @classmethod
    def from_provider(cls, provider: str, token: Optional[str] = None, timeout: int = 30) -> 'IpfsClient':
        return cls(timeout=timeout, **parse_provider(provider, token))

    def _url(self, command: str) -> str:
        return f'{self.protocol}://{self.host}:{self.port}{self.api_path.rstrip("/")}/{command}'

    def add(self, data: bytes, filename: str = 'file') -> str:
        """Add bytes to IPFS and return the CID."""
        url = self._url('add')
        try:
            res = requests.post(url, files={'file': (filename, data)}, headers=self.headers,
                                params={'pin': 'true'}, timeout=self.timeout)
        except requests.RequestException as e:
            raise UploadError(f'IPFS add to {self.host} failed: {e}') from e
        if res.status_code != 200:
            raise UploadError(f'IPFS add returned {res.status_code}: {res.text[:200]}')
        entry = _parse_add_response(res.text)
        logger.debug('IPFS add response %s', entry)
        return entry['Hash']

    def version(self) -> dict:
        url = self._url('version')
        try:
            res = requests.post(url, headers=self.headers, timeout=self.timeout)
            res.raise_for_status()
            return res.json()
        except (requests.RequestException, ValueError) as e:
            raise UploadError(f'IPFS version check against {self.host} failed: {e}') from e
