from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from prometheus_client import Counter, make_asgi_app
from pydantic import BaseModel, Field

from .aggregators import (
    get_feeds,
    get_futures_markets,
    get_perps_markets,
    get_shorting_rewards,
    get_staking_rewards,
    get_synths,
    get_tokens,
    get_users,
    get_versions,
)
from .config import get_settings
from .constants import NETWORKS
from .decoder import decode
from .errors import RegistryError
from .loader import get_source, get_target
from .networks import NETWORK_TO_CHAIN_ID
from .perps import get_perpsv2_proxied_markets
from .store import bundled_networks

settings = get_settings()
logger = logging.getLogger(__name__)

ACCESSOR_REQUESTS_TOTAL = Counter(
    'synth_registry_accessor_requests_total',
    'Metadata accessor calls served by the API',
    ['accessor', 'network', 'outcome']
)

app = FastAPI(title=settings.app_name, default_response_class=ORJSONResponse)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[x.strip() for x in settings.cors_origins.split(',') if x.strip()],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*']
)
app.mount('/metrics', make_asgi_app())


class DecodeRequest(BaseModel):
    data: str = Field(..., min_length=2)
    target: str | None = None
    decode_migration: bool = False
    enhance_decode: bool = False


def _serve(accessor: str, network: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
    try:
        result = fn(network=network, **kwargs)
    except RegistryError as exc:
        ACCESSOR_REQUESTS_TOTAL.labels(accessor=accessor, network=network, outcome='error').inc()
        logger.info('accessor=%s network=%s failed: %s', accessor, network, exc.detail)
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    ACCESSOR_REQUESTS_TOTAL.labels(accessor=accessor, network=network, outcome='ok').inc()
    return result


@app.get('/health')
async def health() -> dict[str, str]:
    return {'status': 'ok'}


@app.get('/v1/networks')
async def networks() -> dict:
    return {
        'networks': NETWORKS,
        'bundled': bundled_networks(),
        'chain_ids': NETWORK_TO_CHAIN_ID
    }


@app.get('/v1/{network}/targets')
async def targets(network: str, contract: str | None = None, use_ovm: bool = False) -> dict:
    return _serve('targets', network, get_target, use_ovm=use_ovm, contract=contract)


@app.get('/v1/{network}/sources/{source}')
async def source(network: str, source: str, use_ovm: bool = False) -> dict:
    return _serve('sources', network, get_source, use_ovm=use_ovm, contract=source)


@app.get('/v1/{network}/synths')
async def synths(network: str, use_ovm: bool = False, skip_populate: bool = False) -> list:
    return _serve('synths', network, get_synths, use_ovm=use_ovm, skip_populate=skip_populate)


@app.get('/v1/{network}/feeds')
async def feeds(network: str, use_ovm: bool = False) -> dict:
    return _serve('feeds', network, get_feeds, use_ovm=use_ovm)


@app.get('/v1/{network}/tokens')
async def tokens(network: str, use_ovm: bool = False) -> list:
    return _serve('tokens', network, get_tokens, use_ovm=use_ovm)


@app.get('/v1/{network}/futures-markets')
async def futures_markets(network: str, use_ovm: bool = False) -> list:
    return _serve('futures_markets', network, get_futures_markets, use_ovm=use_ovm)


@app.get('/v1/{network}/perps-markets')
async def perps_markets(network: str, use_ovm: bool = False) -> list:
    return _serve('perps_markets', network, get_perps_markets, use_ovm=use_ovm)


@app.get('/v1/{network}/perpsv2-proxied-markets')
async def perpsv2_proxied_markets(network: str, use_ovm: bool = False) -> dict:
    return _serve('perpsv2_proxied_markets', network, get_perpsv2_proxied_markets, use_ovm=use_ovm)


@app.get('/v1/{network}/staking-rewards')
async def staking_rewards(network: str, use_ovm: bool = False) -> list:
    return _serve('staking_rewards', network, get_staking_rewards, use_ovm=use_ovm)


@app.get('/v1/{network}/shorting-rewards')
async def shorting_rewards(network: str, use_ovm: bool = False) -> list:
    return _serve('shorting_rewards', network, get_shorting_rewards, use_ovm=use_ovm)


@app.get('/v1/{network}/users')
async def users(network: str, user: str | None = Query(default=None), use_ovm: bool = False) -> Any:
    result = _serve('users', network, get_users, use_ovm=use_ovm, user=user)
    if result is None:
        raise HTTPException(status_code=404, detail=f'user={user} not configured for network={network}')
    return result


@app.get('/v1/{network}/versions')
async def versions(network: str, by_contract: bool = False, use_ovm: bool = False) -> dict:
    return _serve('versions', network, get_versions, use_ovm=use_ovm, by_contract=by_contract)


@app.post('/v1/{network}/decode')
async def decode_call(network: str, request: DecodeRequest, use_ovm: bool = False) -> dict:
    return _serve(
        'decode',
        network,
        decode,
        use_ovm=use_ovm,
        data=request.data,
        target=request.target,
        decode_migration=request.decode_migration,
        enhance_decode=request.enhance_decode
    )
