class User:
    """A customer account."""

    objects = None

    def __init__(self, pk, email):
        self.pk = pk
        self.email = email
