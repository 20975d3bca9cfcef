import os
import sys
import base64
import requests

# Usage: BUSINESS_TOKEN=... STAMPS=3 python scripts/issue_qr.py
# Mints a stamp QR through the API and saves the PNG.

BASE_URL = os.environ.get('BASE_URL', 'http://localhost:5000')
BUSINESS_TOKEN = os.environ.get('BUSINESS_TOKEN')

if not BUSINESS_TOKEN:
    print('Missing BUSINESS_TOKEN in env (see scripts/seed.py)')
    sys.exit(1)

stamps_value = int(os.environ.get('STAMPS', '1'))
headers = {'Authorization': f"Bearer {BUSINESS_TOKEN}"}

r = requests.post(f"{BASE_URL}/api/stamps/generate-qr", headers=headers,
                  json={'stamps_value': stamps_value}, timeout=30)
if r.status_code != 200:
    print('Error:', r.status_code, r.text)
    sys.exit(1)
res = r.json()
print('redemption_id:', res['redemption_id'])
print('expires_at:', res['expires_at'])
print('redeem_url:', res['redeem_url'])
out = os.environ.get('OUT', 'qr.png')
with open(out, 'wb') as f:
    f.write(base64.b64decode(res['qr_png_b64']))
print('PNG saved to', out)

if os.environ.get('POLL', '0') == '1':
    s = requests.get(f"{BASE_URL}/api/stamps/qr-status/{res['redemption_id']}", headers=headers, timeout=30)
    print('status:', s.json().get('status'))
