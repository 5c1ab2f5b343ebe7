from marketplace.extensions import db
from marketplace.ledger.addresses import hex_address_from_identity
import uuid


class Product(db.Model):
    __tablename__ = 'products'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    location = db.Column(db.String(255), nullable=False)
    price = db.Column(db.BigInteger, nullable=False)  # minor units
    seller = db.Column(db.String(255), nullable=False, index=True)
    attachment_url = db.Column(db.Text, nullable=False)
    sold_count = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    __table_args__ = (
        db.CheckConstraint('price > 0', name='ck_product_price_positive'),
        db.CheckConstraint('sold_count >= 0', name='ck_product_sold_count'),
    )

    @property
    def seller_address(self):
        return hex_address_from_identity(self.seller)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'location': self.location,
            'price': self.price,
            'seller': self.seller,
            'seller_address': self.seller_address,
            'attachment_url': self.attachment_url,
            'sold_count': self.sold_count,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
