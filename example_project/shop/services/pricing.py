from shop.models.product import Product


def price_of(sku):
    product = Product.objects.get(sku=sku)
    return product.price


def apply_discount(total, code):
    if code == "WELCOME":
        return total * 0.9
    return total
