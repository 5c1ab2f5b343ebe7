from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from marketplace.extensions import get_marketplace

products_bp = Blueprint('products', __name__)


@products_bp.route('/products', methods=['GET'])
def list_products():
    """
    List all products
    ---
    tags:
      - Products
    parameters:
      - name: seller
        in: query
        type: string
        required: false
    responses:
      200:
        description: List of products
    """
    seller = request.args.get('seller')
    products = get_marketplace().catalog.list(seller=seller)
    return jsonify([p.to_dict() for p in products]), 200


@products_bp.route('/products/<product_id>', methods=['GET'])
def get_product(product_id):
    """
    Get a single product
    ---
    tags:
      - Products
    parameters:
      - name: product_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Product details
      404:
        description: Product not found
    """
    product = get_marketplace().catalog.get(product_id)
    return jsonify(product.to_dict()), 200


@products_bp.route('/products', methods=['POST'])
@jwt_required()
def add_product():
    """
    List a new product for sale
    ---
    tags:
      - Products
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - title
            - description
            - location
            - price
            - attachment_url
          properties:
            title:
              type: string
            description:
              type: string
            location:
              type: string
            price:
              type: integer
              description: Price in token minor units
            attachment_url:
              type: string
    responses:
      201:
        description: Product created
      400:
        description: Invalid payload
    """
    product = get_marketplace().catalog.add(request.get_json(silent=True), get_jwt_identity())
    return jsonify(product.to_dict()), 201


@products_bp.route('/products/<product_id>', methods=['PUT'])
@jwt_required()
def update_product(product_id):
    """
    Update a product
    ---
    tags:
      - Products
    security:
      - Bearer: []
    parameters:
      - name: product_id
        in: path
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title:
              type: string
            description:
              type: string
            location:
              type: string
            price:
              type: integer
            attachment_url:
              type: string
    responses:
      200:
        description: Updated product
      400:
        description: Invalid payload
      404:
        description: Product not found
    """
    product = get_marketplace().catalog.update(product_id, request.get_json(silent=True))
    return jsonify(product.to_dict()), 200


@products_bp.route('/products/<product_id>', methods=['DELETE'])
@jwt_required()
def delete_product(product_id):
    """
    Delete a product
    ---
    tags:
      - Products
    security:
      - Bearer: []
    parameters:
      - name: product_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Product deleted
      404:
        description: Product not found
    """
    deleted_id = get_marketplace().catalog.delete(product_id)
    return jsonify({'id': deleted_id}), 200
