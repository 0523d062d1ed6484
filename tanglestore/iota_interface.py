"""IOTA Tangle integration via PyOTA.

Wraps the handful of node calls the store operation needs: node availability,
address derivation from the configured seed, composing a zero-value transfer
that carries a JSON message, and broadcasting it.
"""
import json
import logging
from typing import List

from iota import Iota, ProposedTransaction, Transaction, TryteString
from iota.crypto.addresses import AddressGenerator
from iota.crypto.types import Seed

from .errors import AvailabilityError, TransactionComposeError, TransactionSubmitError

logger = logging.getLogger(__name__)

# zero-value transfers need no inputs, so the sender seed is a placeholder
EMPTY_SEED = '9' * 81

ADDRESS_INDEX = 0
SECURITY_LEVEL = 2


def to_trytes(payload: dict) -> TryteString:
    """Encode a JSON-serialisable object as a tryte message."""
    return TryteString.from_unicode(json.dumps(payload, separators=(',', ':')))


def from_trytes(trytes) -> dict:
    return json.loads(TryteString(trytes).decode())


class IotaLedger:
    def __init__(self, provider: str, seed: str):
        self.provider = provider
        self.seed = seed
        self.api = Iota(provider, seed=EMPTY_SEED)

    def is_node_available(self, check_sync: bool = True) -> dict:
        """Raise AvailabilityError unless the node answers (and is synced)."""
        try:
            info = self.api.get_node_info()
        except Exception as e:
            raise AvailabilityError(f"The node '{self.provider}' is not available: {e}") from e
        if check_sync:
            latest = info.get('latestMilestoneIndex')
            solid = info.get('latestSolidSubtangleMilestoneIndex')
            if latest is None or latest != solid:
                raise AvailabilityError(
                    f"The node '{self.provider}' is not synchronised "
                    f"(milestone {latest}, solid {solid})")
        return info

    def generate_address(self, index: int = ADDRESS_INDEX, security_level: int = SECURITY_LEVEL):
        gen = AddressGenerator(Seed(self.seed), security_level=security_level)
        return gen.get_addresses(start=index, count=1)[0]

    def prepare_transfer(self, payload: dict) -> List[TryteString]:
        """Compose a signed zero-value bundle carrying `payload` as its message."""
        try:
            address = self.generate_address()
            tx = ProposedTransaction(address=address, value=0, message=to_trytes(payload))
            res = self.api.prepare_transfer(transfers=[tx])
        except Exception as e:
            raise TransactionComposeError(f'Unable to prepare transfer: {e}') from e
        return res['trytes']

    def send_trytes(self, trytes: List[TryteString], depth: int, mwm: int) -> str:
        """Attach and broadcast the bundle; returns the hash of its first transaction."""
        try:
            res = self.api.send_trytes(trytes=trytes, depth=depth, min_weight_magnitude=mwm)
            attached = res['trytes']
            return str(Transaction.from_tryte_string(attached[0]).hash)
        except Exception as e:
            raise TransactionSubmitError(f'Unable to send trytes to {self.provider}: {e}') from e
