import importlib.util
import io
import sys, os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import pytest
import requests
from tanglestore import ipfs_interface
from tanglestore.errors import ConfigParseError, UploadError

SIM_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'services', 'ipfs-sim', 'app.py'))


class FakeResponse:
    def __init__(self, status_code, text):
        self.status_code = status_code
        self.text = text


def test_parse_provider_with_token():
    s = ipfs_interface.parse_provider('https://ipfs.infura.io:5001/api/v0', 'dG9rZW4=')
    assert s == {
        'protocol': 'https',
        'host': 'ipfs.infura.io',
        'port': 5001,
        'api_path': '/api/v0',
        'headers': {'Authorization': 'Basic dG9rZW4='},
    }


def test_parse_provider_without_path_or_token():
    s = ipfs_interface.parse_provider('http://127.0.0.1:5001')
    assert s['host'] == '127.0.0.1'
    assert s['api_path'] == '/api/v0'
    assert s['headers'] is None


@pytest.mark.parametrize('provider', ['', 'ipfs.infura.io:5001', 'https://ipfs.infura.io/api/v0', 'ftp://h:1/x'])
def test_parse_provider_rejects(provider):
    with pytest.raises(ConfigParseError):
        ipfs_interface.parse_provider(provider)


def test_add_posts_to_api_path(monkeypatch):
    calls = {}

    def fake_post(url, files=None, headers=None, params=None, timeout=None):
        calls['url'] = url
        calls['headers'] = headers
        calls['file'] = files['file']
        return FakeResponse(200, '{"Name":"a.txt","Hash":"QmHash","Size":"13"}\n')

    monkeypatch.setattr(requests, 'post', fake_post)
    client = ipfs_interface.IpfsClient.from_provider('https://ipfs.example:5001/api/v0/', 'tok')
    assert client.add(b'hello', filename='a.txt') == 'QmHash'
    assert calls['url'] == 'https://ipfs.example:5001/api/v0/add'
    assert calls['headers'] == {'Authorization': 'Basic tok'}
    assert calls['file'] == ('a.txt', b'hello')


def test_add_takes_last_ndjson_entry(monkeypatch):
    body = '{"Name":"a","Hash":"QmChild"}\n{"Name":"","Hash":"QmRoot"}\n'
    monkeypatch.setattr(requests, 'post', lambda *a, **kw: FakeResponse(200, body))
    client = ipfs_interface.IpfsClient('http', 'localhost', 5001)
    assert client.add(b'x') == 'QmRoot'


def test_add_http_error(monkeypatch):
    monkeypatch.setattr(requests, 'post', lambda *a, **kw: FakeResponse(401, 'unauthorized'))
    client = ipfs_interface.IpfsClient('http', 'localhost', 5001)
    with pytest.raises(UploadError):
        client.add(b'x')


def test_add_connection_error(monkeypatch):
    def boom(*a, **kw):
        raise requests.ConnectionError('refused')
    monkeypatch.setattr(requests, 'post', boom)
    client = ipfs_interface.IpfsClient('http', 'localhost', 5001)
    with pytest.raises(UploadError):
        client.add(b'x')


def test_add_against_simulator(monkeypatch, tmp_path):
    monkeypatch.setenv('IPFS_SIM_DATA_DIR', str(tmp_path))
    spec = importlib.util.spec_from_file_location('ipfs_sim_app', SIM_PATH)
    sim = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(sim)
    sim_client = sim.app.test_client()

    def fake_post(url, files=None, headers=None, params=None, timeout=None):
        path = url.split(':5001', 1)[1]
        name, content = files['file']
        r = sim_client.post(path, data={'file': (io.BytesIO(content), name)},
                            content_type='multipart/form-data')
        return FakeResponse(r.status_code, r.get_data(as_text=True))

    monkeypatch.setattr(requests, 'post', fake_post)
    client = ipfs_interface.IpfsClient('http', '127.0.0.1', 5001)
    cid = client.add(b'hello', filename='hello.txt')
    assert cid.startswith('sim')
    assert (tmp_path / cid).read_bytes() == b'hello'

    r = sim_client.post('/api/v0/cat', query_string={'arg': cid})
    assert r.status_code == 200
    assert r.data == b'hello'
    assert sim_client.post('/api/v0/cat', query_string={'arg': 'missing'}).status_code == 404
