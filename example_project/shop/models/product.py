class Product:
    objects = None

    def __init__(self, sku, price):
        self.sku = sku
        self.price = price
