import time
from dataclasses import dataclass
from typing import Any, Callable

from flask import current_app

from ..repository import StampRepository
from .cache import PendingQrCache, connect_store
from .issuance import QrIssuanceService
from .ledger import RedemptionLedger
from .status import QrStatusService
from .tokens import TokenCodec


@dataclass
class StampServices:
    codec: TokenCodec
    store: Any
    pending: PendingQrCache
    issuance: QrIssuanceService
    ledger: RedemptionLedger
    status: QrStatusService
    clock: Callable[[], float]


def build_services(config, clock=time.time) -> StampServices:
    codec = TokenCodec(
        config.get('JWT_SECRET'),
        issuer=config.get('JWT_ISSUER', 'go-out-loyalty'),
        algorithm=config.get('JWT_ALG', 'HS256'),
        clock=clock,
    )
    store = connect_store(config.get('REDIS_URL'), config.get('USE_REDIS', True), clock=clock)
    ttl = int(config.get('QR_TTL_SECONDS', 30))
    pending = PendingQrCache(store)
    repository = StampRepository()
    return StampServices(
        codec=codec,
        store=store,
        pending=pending,
        issuance=QrIssuanceService(codec, pending, ttl=ttl, clock=clock),
        ledger=RedemptionLedger(codec, repository, clock=clock),
        status=QrStatusService(pending, repository, ttl=ttl, clock=clock),
        clock=clock,
    )


def init_services(app, clock=time.time) -> StampServices:
    svc = build_services(app.config, clock=clock)
    app.extensions['stampqr'] = svc
    return svc


def services() -> StampServices:
    return current_app.extensions['stampqr']
