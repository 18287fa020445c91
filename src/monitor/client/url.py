from collections.abc import Mapping

import httpx

from monitor.domain.exceptions import ConstructionError


def build_url(base: str, params: Mapping[str, str]) -> str:
    """Merge `params` into the query string of `base`.

    Parameters are encoded in the mapping's iteration order, after any
    query already present on `base`. Receivers must not depend on the
    order.
    """
    try:
        url = httpx.URL(base)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConstructionError(f"invalid base URL {base!r}: {e}", details={"url": base}) from e

    return str(url.copy_merge_params(dict(params)))
