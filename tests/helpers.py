from stampqr.models import db, Customer

SECRET = 'test-secret-0123456789abcdef0123456789abcdef'
START = 1_700_000_000


class FakeClock:
    def __init__(self, now: float = START):
        self.now = float(now)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def reload_customer(customer_id):
    db.session.expire_all()
    return db.session.get(Customer, customer_id)
