"""
Order routes
POST /orders            reserve a product (and pull payment in allowance mode)
POST /orders/complete   verify a ledger transfer and complete the order
GET  /orders            caller's completed orders
GET  /orders/pending    caller's live reservations
"""

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from marketplace.errors import InvalidPayload
from marketplace.extensions import get_marketplace

orders_bp = Blueprint("orders", __name__)


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidPayload("Request body must be a JSON object")
    return data


def _require_int(data, field):
    value = data.get(field)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidPayload(f"{field} must be a non-negative integer")
    return value


# --- POST /orders -------------------------------------------------------
# Body: { product_id }
@orders_bp.route("/orders", methods=["POST"])
@jwt_required()
def create_order_route():
    """
    Create an order for a product
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - product_id
          properties:
            product_id:
              type: string
    responses:
      201:
        description: Pending order with the memo to pay with (completed order in allowance mode)
      400:
        description: Missing product_id
      402:
        description: Allowance transfer rejected
      404:
        description: Product not found
      503:
        description: Ledger unavailable
    """
    data = _json_body()
    product_id = data.get("product_id")
    if not product_id:
        raise InvalidPayload("Missing fields: product_id")

    order = get_marketplace().create_order(product_id, get_jwt_identity())
    return jsonify(order.to_dict()), 201


# --- POST /orders/complete ----------------------------------------------
# Body: { seller, product_id, price, block_index, memo }
@orders_bp.route("/orders/complete", methods=["POST"])
@jwt_required()
def complete_purchase_route():
    """
    Complete a purchase after paying on the ledger
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - seller
            - product_id
            - price
            - block_index
            - memo
          properties:
            seller:
              type: string
            product_id:
              type: string
            price:
              type: integer
            block_index:
              type: integer
            memo:
              type: integer
    responses:
      200:
        description: Completed order
      400:
        description: Invalid payload
      402:
        description: Payment could not be verified
      404:
        description: No pending order for this memo (expired or already completed)
    """
    data = _json_body()
    required = ["seller", "product_id", "price", "block_index", "memo"]
    missing = [f for f in required if data.get(f) is None or data.get(f) == ""]
    if missing:
        raise InvalidPayload(f"Missing fields: {', '.join(missing)}")

    order = get_marketplace().complete_purchase(
        buyer=get_jwt_identity(),
        seller=data["seller"],
        product_id=data["product_id"],
        price=_require_int(data, "price"),
        block_index=_require_int(data, "block_index"),
        correlation_id=_require_int(data, "memo"),
    )
    return jsonify(order.to_dict()), 200


# --- GET /orders --------------------------------------------------------
@orders_bp.route("/orders", methods=["GET"])
@jwt_required()
def list_orders_route():
    """
    List the caller's completed orders
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    responses:
      200:
        description: Completed orders, newest first
    """
    orders = get_marketplace().list_orders(get_jwt_identity())
    return jsonify([o.to_dict() for o in orders]), 200


# --- GET /orders/pending ------------------------------------------------
@orders_bp.route("/orders/pending", methods=["GET"])
@jwt_required()
def list_pending_route():
    """
    List the caller's orders awaiting payment
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    responses:
      200:
        description: Pending orders that have not expired
    """
    pending = get_marketplace().list_pending(get_jwt_identity())
    return jsonify([o.to_dict() for o in pending]), 200
