import os


def _read_secret_file(*paths):
    for p in paths:
        try:
            with open(p, 'r') as f:
                return f.read().strip()
        except OSError:
            continue
    return None


def _flag(name, default):
    return os.environ.get(name, default).lower() not in ('0', 'false', 'no')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///local.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET = os.environ.get('JWT_SECRET')
    JWT_ISSUER = os.environ.get('JWT_ISSUER', 'go-out-loyalty')
    JWT_ALG = 'HS256'
    QR_TTL_SECONDS = int(os.environ.get('QR_TTL_SECONDS', '30'))
    BUSINESS_TOKEN_TTL = int(os.environ.get('BUSINESS_TOKEN_TTL', str(7 * 24 * 3600)))
    REDIS_URL = os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
    USE_REDIS = _flag('USE_REDIS', '1')
    BASE_URL = os.environ.get('BASE_URL', 'http://localhost:5000')
    ADMIN_API_KEY = os.environ.get('ADMIN_API_KEY')
    RATE_LIMIT_MAX_REQUESTS = int(os.environ.get('RATE_LIMIT_MAX_REQUESTS', '100'))
    RATE_LIMIT_WINDOW_SECONDS = int(os.environ.get('RATE_LIMIT_WINDOW_SECONDS', '900'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    def __init__(self):
        # Secret Files on Render are mounted under /etc/secrets
        if not self.JWT_SECRET:
            self.JWT_SECRET = _read_secret_file('/etc/secrets/jwt_secret', 'jwt_secret')
        if (not self.SECRET_KEY) or self.SECRET_KEY == 'dev':
            self.SECRET_KEY = _read_secret_file('/etc/secrets/secret_key') or self.SECRET_KEY
        if not self.ADMIN_API_KEY:
            self.ADMIN_API_KEY = _read_secret_file('/etc/secrets/admin_api_key')
