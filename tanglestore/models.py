from dataclasses import dataclass, asdict
from typing import Optional


@dataclass(frozen=True)
class StoreRequest:
    name: str
    description: str
    size: float
    modified: str
    sha256: str
    data: str

    @classmethod
    def from_dict(cls, d: dict) -> 'StoreRequest':
        return cls(
            name=d.get('name'),
            description=d.get('description'),
            size=d.get('size'),
            modified=d.get('modified'),
            sha256=d.get('sha256'),
            data=d.get('data'),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TanglePayload:
    """Metadata record embedded in the ledger message; `ipfs` is the storage id."""
    name: str
    description: str
    size: float
    modified: str
    sha256: str
    ipfs: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class StoreResponse:
    success: bool
    message: str
    transaction_hash: Optional[str] = None
    storage_id: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def ok(cls, transaction_hash: str, storage_id: str) -> 'StoreResponse':
        return cls(success=True, message='OK', transaction_hash=transaction_hash, storage_id=storage_id)

    @classmethod
    def failed(cls, message: str, error_kind: str) -> 'StoreResponse':
        return cls(success=False, message=message, error_kind=error_kind)

    def to_dict(self) -> dict:
        out = {'success': self.success, 'message': self.message}
        if self.success:
            out['transactionHash'] = self.transaction_hash
            out['storageId'] = self.storage_id
        else:
            out['errorKind'] = self.error_kind
        return out
