class Order:
    objects = None

    def __init__(self, user, status="open"):
        self.user = user
        self.status = status
        self.lines = []

    def save(self):
        pass


class OrderLine:
    objects = None

    def __init__(self, order, sku, qty, unit_price):
        self.order = order
        self.sku = sku
        self.qty = qty
        self.unit_price = unit_price
