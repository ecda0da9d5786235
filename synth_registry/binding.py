from __future__ import annotations

import inspect
from typing import Any, Callable

from . import aggregators, decoder, loader, perps
from .loader import PathLike

BOUND_FUNCTIONS: dict[str, Callable[..., Any]] = {
    'decode': decoder.decode,
    'get_ast': aggregators.get_ast,
    'get_path_to_network': loader.get_path_to_network,
    'get_source': loader.get_source,
    'get_staking_rewards': aggregators.get_staking_rewards,
    'get_shorting_rewards': aggregators.get_shorting_rewards,
    'get_feeds': aggregators.get_feeds,
    'get_offchain_feeds': aggregators.get_offchain_feeds,
    'get_synths': aggregators.get_synths,
    'get_target': loader.get_target,
    'get_futures_markets': aggregators.get_futures_markets,
    'get_perps_markets': aggregators.get_perps_markets,
    'get_perpsv2_proxied_markets': perps.get_perpsv2_proxied_markets,
    'get_tokens': aggregators.get_tokens,
    'get_users': aggregators.get_users,
    'get_versions': aggregators.get_versions
}


class Binding:
    """Accessors pinned to one network; keywords passed at call time take precedence."""

    def __init__(self, network: str, use_ovm: bool = False, explicit_path: PathLike | None = None) -> None:
        self.network = network
        self.use_ovm = use_ovm
        self.explicit_path = explicit_path

    def _defaults_for(self, fn: Callable[..., Any]) -> dict[str, Any]:
        accepted = inspect.signature(fn).parameters
        defaults = {'network': self.network, 'use_ovm': self.use_ovm, 'explicit_path': self.explicit_path}
        return {key: value for key, value in defaults.items() if key in accepted}

    def __getattr__(self, name: str) -> Callable[..., Any]:
        fn = BOUND_FUNCTIONS.get(name)
        if fn is None:
            raise AttributeError(name)

        def bound(**kwargs: Any) -> Any:
            return fn(**{**self._defaults_for(fn), **kwargs})

        bound.__name__ = name
        bound.__doc__ = fn.__doc__
        return bound

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(BOUND_FUNCTIONS))

    def __repr__(self) -> str:
        return f'Binding(network={self.network!r}, use_ovm={self.use_ovm!r}, explicit_path={self.explicit_path!r})'


def wrap(network: str, use_ovm: bool = False, explicit_path: PathLike | None = None) -> Binding:
    return Binding(network=network, use_ovm=use_ovm, explicit_path=explicit_path)
