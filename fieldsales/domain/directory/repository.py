"""Directory repository - read-only lookups of vendors and clients"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Client, Vendor
from ...shared.exceptions import NotFoundError


class DirectoryRepository:
    """Foreign-key validation against the client/vendor directory"""

    @staticmethod
    def get_vendor(db: Session, vendor_id: int) -> Optional[Vendor]:
        return db.query(Vendor).filter(Vendor.id == vendor_id).first()

    @staticmethod
    def get_client(db: Session, client_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @classmethod
    def require_vendor(cls, db: Session, vendor_id: int) -> Vendor:
        vendor = cls.get_vendor(db, vendor_id)
        if not vendor:
            raise NotFoundError(f"Vendor {vendor_id} not found")
        return vendor

    @classmethod
    def require_client(cls, db: Session, client_id: int) -> Client:
        client = cls.get_client(db, client_id)
        if not client:
            raise NotFoundError(f"Client {client_id} not found")
        return client
