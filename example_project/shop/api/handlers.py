from shop.models.user import User
from shop.services import orders


class OrderHandler:
    def post(self, request):
        user = self._current_user(request)
        return orders.checkout(user.pk, request.cart)

    def delete(self, request, order_id):
        return orders.cancel(order_id)

    def _current_user(self, request):
        return User.objects.get(pk=request.user_id)

    @staticmethod
    def health():
        return {"status": "ok"}
