"""Store a file on IPFS and anchor its metadata on the IOTA Tangle.

`ipfs_store` validates the request, uploads the decoded bytes to IPFS, then
sends a zero-value transaction whose message holds the file metadata and the
IPFS hash. It never raises: every failure comes back as a failed
`StoreResponse` carrying the error, its traceback and the step trace.

Nothing is rolled back. If the upload succeeds and the transaction fails the
content stays on IPFS.
"""
import logging
import time
import traceback
from collections.abc import Mapping
from typing import Callable, Optional

from . import validation
from .config import StoreConfig
from .errors import (ChecksumMismatchError, SizeError, TransactionSubmitError, UploadError,
                     ValidationError, error_kind)
from .ipfs_interface import IpfsClient, parse_provider
from .models import StoreRequest, StoreResponse, TanglePayload
from .trace import StepTrace
from .utils import decode_base64, hash_bytes

logger = logging.getLogger(__name__)

MAX_SIZE = 10240


def _default_ledger(config: StoreConfig):
    from .iota_interface import IotaLedger
    return IotaLedger(config.node.provider, config.seed)


def _default_storage(settings: dict, timeout: int):
    return IpfsClient(timeout=timeout, **settings)


def ipfs_store(config: StoreConfig, request, ledger=None,
               storage_factory: Optional[Callable] = None) -> StoreResponse:
    trace = StepTrace('ipfsStore', logger)
    try:
        with trace:
            if isinstance(request, StoreRequest):
                request = request.to_dict()
            if not isinstance(request, Mapping):
                raise ValidationError('The request must be a JSON object.', field='request')

            request = dict(request)
            validation.store_request(request)
            req = StoreRequest.from_dict(request)
            trace.step('validate', 'name=%s size=%s', req.name, req.size)

            if ledger is None:
                ledger = _default_ledger(config)
            trace.step('isNodeAvailable', config.node.provider)
            ledger.is_node_available(check_sync=True)

            buffer = decode_base64(req.data)
            trace.step('decode', 'length=%s', len(buffer))
            if len(buffer) == 0:
                raise SizeError('The file must be greater than 0 bytes in length.')
            if len(buffer) >= MAX_SIZE:
                raise SizeError(
                    f'The file is too large for this demonstration, it should be less than {MAX_SIZE} bytes.')

            hex_digest = hash_bytes(buffer)
            if hex_digest != req.sha256:
                raise ChecksumMismatchError(req.sha256, hex_digest)
            trace.step('checksum', hex_digest)

            settings = parse_provider(config.ipfs.provider, config.ipfs.token)
            trace.step('ipfsConfig', '%s://%s:%s%s auth=%s', settings['protocol'], settings['host'],
                       settings['port'], settings['api_path'], bool(settings['headers']))
            storage = (storage_factory or _default_storage)(settings, config.ipfs.timeout)

            add_start = time.monotonic()
            trace.step('ipfsAdd', 'adding file %s to IPFS of length %s', req.name, req.size)
            storage_id = storage.add(buffer, filename=req.name)
            if not storage_id:
                raise UploadError('IPFS did not return a hash for the file.')
            trace.step('ipfsAdd', 'complete in %sms, hash %s', int((time.monotonic() - add_start) * 1000), storage_id)

            payload = TanglePayload(
                name=req.name,
                description=req.description,
                size=req.size,
                modified=req.modified,
                sha256=req.sha256,
                ipfs=storage_id,
            )

            trace.step('prepareTransfer')
            trytes = ledger.prepare_transfer(payload.to_dict())

            send_start = time.monotonic()
            trace.step('sendTrytes', 'depth=%s mwm=%s', config.node.depth, config.node.mwm)
            transaction_hash = ledger.send_trytes(trytes, config.node.depth, config.node.mwm)
            if not transaction_hash:
                raise TransactionSubmitError('The node did not return a transaction hash.')
            trace.step('sendTrytes', 'complete in %sms, transaction %s',
                       int((time.monotonic() - send_start) * 1000), transaction_hash)

            return StoreResponse.ok(transaction_hash=transaction_hash, storage_id=storage_id)
    except Exception as err:
        return StoreResponse.failed(
            f'{err}\n{traceback.format_exc()}\n{trace.render()}',
            error_kind(err),
        )
