"""Order workflows."""
import shop.models.order as order_models
from shop.models.user import User

from . import pricing


def checkout(user_id, cart):
    user = User.objects.get(pk=user_id)
    order = order_models.Order.objects.create(user=user)
    for sku, qty in cart:
        _add_line(order, sku, qty)
    return order


def _add_line(order, sku, qty):
    unit = pricing.price_of(sku)
    return order_models.OrderLine.objects.create(order=order, sku=sku, qty=qty, unit_price=unit)


def cancel(order_id):
    order = order_models.Order.objects.get(pk=order_id)
    order.status = "cancelled"
    order.save()
    return order
