import os, sys, pathlib
# Ensure project root is on PYTHONPATH when running directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stampqr import create_app
from stampqr.auth import issue_business_token
from stampqr.models import db, Business, Customer

# Usage: python scripts/seed.py [BUSINESS_NAME]
# Creates a demo business with one enrolled customer and prints a business token.

app = create_app()
with app.app_context():
    name = sys.argv[1] if len(sys.argv) > 1 else 'Demo Coffee'
    biz = Business(name=name, email=f"{name.lower().replace(' ', '.')}@example.com")
    db.session.add(biz)
    db.session.flush()
    cust = Customer(business_id=biz.id, phone='+15550000001', first_name='Demo', last_name='Customer')
    db.session.add(cust)
    db.session.commit()

    print('business_id:', biz.id)
    print('customer_id:', cust.id)
    print('business_token:', issue_business_token(biz.id))
    print('BASE_URL:', os.environ.get('BASE_URL', 'http://localhost:5000'))
