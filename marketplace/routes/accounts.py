from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from marketplace.extensions import get_marketplace

accounts_bp = Blueprint('accounts', __name__)


@accounts_bp.route('/accounts/<identity>/address', methods=['GET'])
def get_address(identity):
    """
    Get the ledger address of an identity
    ---
    tags:
      - Accounts
    parameters:
      - in: path
        name: identity
        required: true
        type: string
    responses:
      200:
        description: Hex ledger address to send payments to
    """
    return jsonify({'identity': identity, 'account': get_marketplace().address_of(identity)}), 200


@accounts_bp.route('/accounts/me', methods=['GET'])
@jwt_required()
def get_own_account():
    """
    Get the caller's ledger address and token balance
    ---
    tags:
      - Accounts
    security:
      - Bearer: []
    responses:
      200:
        description: Address and balance in minor units
      503:
        description: Ledger unavailable
    """
    identity = get_jwt_identity()
    marketplace = get_marketplace()
    return jsonify({
        'identity': identity,
        'account': marketplace.address_of(identity),
        'balance': marketplace.balance_of(identity),
    }), 200


@accounts_bp.route('/ledger/fee', methods=['GET'])
def get_transfer_fee():
    """
    Get the ledger transfer fee
    ---
    tags:
      - Accounts
    responses:
      200:
        description: Fee in minor units
      503:
        description: Ledger unavailable
    """
    return jsonify({'transfer_fee': get_marketplace().transfer_fee()}), 200
