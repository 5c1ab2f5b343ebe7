import unittest

from marketplace.ledger import hex_address_from_identity
from tests.base import BUYER, E8S, SELLER, SERVICE, MarketplaceTestCase


class TestOrdersApi(MarketplaceTestCase):
    def setUp(self):
        super().setUp()
        # Seller lists a product priced at 5 tokens
        resp = self.client.post('/products', json=self.product_payload(), headers=self.auth(SELLER))
        self.assertEqual(resp.status_code, 201)
        self.product = resp.get_json()
        self.buyer_headers = self.auth(BUYER)

    def create_order(self):
        resp = self.client.post('/orders', json={'product_id': self.product['id']}, headers=self.buyer_headers)
        self.assertEqual(resp.status_code, 201)
        return resp.get_json()

    def transfer(self, order, amount=None, caller=BUYER):
        # The buyer pays the seller directly on the ledger, using the order memo
        return self.ledger.transfer(
            order['seller_address'],
            order['price'] if amount is None else amount,
            order['memo'],
            caller=caller,
        )

    def complete(self, order, block_index, **overrides):
        body = {
            'seller': order['seller'],
            'product_id': order['product_id'],
            'price': order['price'],
            'block_index': block_index,
            'memo': order['memo'],
        }
        body.update(overrides)
        return self.client.post('/orders/complete', json=body, headers=self.buyer_headers)

    def test_purchase_flow(self):
        # 1. Create the order
        order = self.create_order()
        self.assertEqual(order['status'], 'PaymentPending')
        self.assertEqual(order['price'], 5 * E8S)
        self.assertEqual(order['seller_address'], hex_address_from_identity(SELLER))
        self.assertEqual(order['memo'], order['correlation_id'])

        resp = self.client.get('/orders/pending', headers=self.buyer_headers)
        self.assertEqual([o['memo'] for o in resp.get_json()], [order['memo']])

        # 2. Pay on the ledger, 60 seconds later
        self.clock.advance(60)
        block_index = self.transfer(order)

        # 3. Complete the purchase
        resp = self.complete(order, block_index)
        self.assertEqual(resp.status_code, 200)
        completed = resp.get_json()
        self.assertEqual(completed['status'], 'Completed')
        self.assertEqual(completed['paid_at_block'], block_index)
        self.assertEqual(completed['buyer'], BUYER)

        # 4. Product sold count and order history reflect the sale
        resp = self.client.get(f"/products/{self.product['id']}")
        self.assertEqual(resp.get_json()['sold_count'], 1)

        resp = self.client.get('/orders', headers=self.buyer_headers)
        self.assertEqual([o['id'] for o in resp.get_json()], [completed['id']])
        resp = self.client.get('/orders/pending', headers=self.buyer_headers)
        self.assertEqual(resp.get_json(), [])

        # 5. Replaying the same completion finds nothing to complete
        resp = self.complete(order, block_index)
        self.assertEqual(resp.status_code, 404)

    def test_completion_after_ttl_is_not_found(self):
        order = self.create_order()
        block_index = self.transfer(order)
        self.clock.advance(121)

        resp = self.complete(order, block_index)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json()['error_code'], 'NOT_FOUND')

        resp = self.client.get(f"/products/{self.product['id']}")
        self.assertEqual(resp.get_json()['sold_count'], 0)
        self.assertEqual(self.client.get('/orders', headers=self.buyer_headers).get_json(), [])

    def test_underpayment_is_rejected_then_retry_succeeds(self):
        order = self.create_order()
        short_block = self.transfer(order, amount=order['price'] - 1)

        resp = self.complete(order, short_block)
        self.assertEqual(resp.status_code, 402)
        self.assertEqual(resp.get_json()['error_code'], 'PAYMENT_VERIFICATION_FAILED')

        good_block = self.transfer(order)
        resp = self.complete(order, good_block)
        self.assertEqual(resp.status_code, 200)

    def test_claiming_a_lower_price_is_rejected(self):
        order = self.create_order()
        block_index = self.transfer(order, amount=1)

        resp = self.complete(order, block_index, price=1)
        self.assertEqual(resp.status_code, 402)

    def test_create_order_unknown_product(self):
        resp = self.client.post('/orders', json={'product_id': 'missing'}, headers=self.buyer_headers)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(self.client.get('/orders/pending', headers=self.buyer_headers).get_json(), [])

    def test_create_order_requires_product_id(self):
        resp = self.client.post('/orders', json={}, headers=self.buyer_headers)
        self.assertEqual(resp.status_code, 400)

    def test_complete_validates_body(self):
        order = self.create_order()
        resp = self.client.post('/orders/complete', json={'memo': order['memo']}, headers=self.buyer_headers)
        self.assertEqual(resp.status_code, 400)
        self.assertIn('block_index', resp.get_json()['error'])

        resp = self.complete(order, 'seven')
        self.assertEqual(resp.status_code, 400)

    def test_orders_require_token(self):
        self.assertEqual(self.client.get('/orders').status_code, 401)
        self.assertEqual(self.client.post('/orders', json={'product_id': self.product['id']}).status_code, 401)


class TestAllowanceOrdersApi(MarketplaceTestCase):
    payment_mode = 'allowance'

    def test_order_is_paid_from_allowance(self):
        resp = self.client.post('/products', json=self.product_payload(), headers=self.auth(SELLER))
        product = resp.get_json()
        self.ledger.approve(BUYER, SERVICE, 5 * E8S)

        resp = self.client.post('/orders', json={'product_id': product['id']}, headers=self.auth(BUYER))
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.get_json()['status'], 'Completed')
        self.assertEqual(self.ledger.balance(hex_address_from_identity(SELLER)), 5 * E8S)

    def test_order_without_allowance_is_rejected(self):
        resp = self.client.post('/products', json=self.product_payload(), headers=self.auth(SELLER))
        product = resp.get_json()

        resp = self.client.post('/orders', json={'product_id': product['id']}, headers=self.auth(BUYER))
        self.assertEqual(resp.status_code, 402)
        self.assertEqual(self.client.get('/orders/pending', headers=self.auth(BUYER)).get_json(), [])


if __name__ == '__main__':
    unittest.main()
